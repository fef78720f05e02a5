"""
Integration tests for partner program views.

Tests cover:
- Dashboard statistics
- Level computation over stored data
- Commission and withdrawal history
- Levels listing and team breakdown
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from partner_engine.models import CommissionStatus, TaxStatus, WithdrawalStatus
from partner_engine.services.partner.closure_maintainer import ClosureMaintainer
from partner_engine.services.partner.partner_service import PartnerService
from partner_engine.services.partner.queries import CommissionQuery, WithdrawalQuery
from partner_engine.utils.exceptions import PartnerNotFound

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


class TestDashboard:
    """Test dashboard statistics."""

    @pytest.mark.asyncio
    async def test_dashboard(self, db_session, make_user, add_transaction, add_commission, add_withdrawal):
        """Referral, earnings and balance figures for one partner."""
        partner = await make_user()
        buyer = await make_user()
        idle = await make_user()
        grandchild = await make_user()
        maintainer = ClosureMaintainer(db_session)
        await maintainer.attach_referral(buyer.id, partner.id)
        await maintainer.attach_referral(idle.id, partner.id)
        await maintainer.attach_referral(grandchild.id, buyer.id)
        await add_transaction(buyer.id, "1000")

        await add_commission(partner.id, buyer.id, "100", created_at=datetime(2026, 10, 2, tzinfo=UTC))
        await add_commission(
            partner.id, buyer.id, "50", status=CommissionStatus.PAID,
            created_at=datetime(2026, 9, 15, tzinfo=UTC),
        )
        await add_commission(partner.id, buyer.id, "30", status=CommissionStatus.PENDING, created_at=NOW)
        await add_commission(
            partner.id, buyer.id, "70", created_at=datetime(2026, 8, 31, tzinfo=UTC),
        )
        await add_withdrawal(partner.id, "20")

        dashboard = await PartnerService(db_session).get_dashboard(partner.id, now=NOW)

        assert dashboard.level == 1
        assert dashboard.level_name == "Стартер"
        assert dashboard.direct_referrals == 2
        assert dashboard.active_referrals == 1
        assert dashboard.team_size == 3
        assert dashboard.total_earnings == Decimal("170")
        assert dashboard.pending_earnings == Decimal("30")
        assert dashboard.available_balance == Decimal("150")
        assert dashboard.this_month_earnings == Decimal("100")
        assert dashboard.last_month_earnings == Decimal("50")
        assert dashboard.next_level == 2
        assert dashboard.next_level_name == "Бронза"
        # 2/5 referrals = 40, 1000/10000 volume = 10
        assert dashboard.next_level_progress == 25

    @pytest.mark.asyncio
    async def test_partner_looked_up_once(self, db_session, make_user, monkeypatch):
        """The existence check happens once per dashboard."""
        partner = await make_user()
        service = PartnerService(db_session)
        lookups = []
        real_get_by_id = service.levels.users.get_by_id

        async def counting_get(user_id):
            lookups.append(user_id)
            return await real_get_by_id(user_id)

        monkeypatch.setattr(service.levels.users, "get_by_id", counting_get)
        monkeypatch.setattr(service.users, "get_by_id", counting_get)

        await service.get_dashboard(partner.id, now=NOW)

        assert lookups == [partner.id]

    @pytest.mark.asyncio
    async def test_unknown_partner(self, db_session):
        """Missing user raises PartnerNotFound."""
        with pytest.raises(PartnerNotFound):
            await PartnerService(db_session).get_dashboard(999_999)


class TestComputeLevel:
    """Test level computation over the closure table and transactions."""

    @pytest.mark.asyncio
    async def test_team_volume_includes_all_depths(self, db_session, make_user, add_transaction):
        """Five direct referrals and deep volume reach level 2."""
        partner = await make_user()
        maintainer = ClosureMaintainer(db_session)
        directs = []
        for _ in range(5):
            user = await make_user()
            await maintainer.attach_referral(user.id, partner.id)
            directs.append(user)
        deep = await make_user()
        await maintainer.attach_referral(deep.id, directs[0].id)
        await add_transaction(directs[1].id, "4000")
        await add_transaction(deep.id, "6000")
        await add_transaction(partner.id, "90000")

        progress = await PartnerService(db_session).get_level(partner.id)

        assert progress.direct_referrals == 5
        assert progress.team_volume == Decimal("10000")
        assert progress.level.level_number == 2


class TestHistory:
    """Test paginated history views."""

    @pytest.mark.asyncio
    async def test_commission_history_filters_and_pages(self, db_session, make_user, add_commission):
        """Newest first, filtered by status and level, with source names."""
        partner = await make_user()
        source = await make_user(first_name="Иван", last_name="Иванов")
        for day in range(1, 6):
            await add_commission(
                partner.id, source.id, f"{day}0",
                created_at=datetime(2026, 10, day, tzinfo=UTC),
            )
        await add_commission(partner.id, source.id, "5", status=CommissionStatus.PENDING, level=2)
        service = PartnerService(db_session)

        page = await service.get_commissions(
            partner.id, CommissionQuery(status=CommissionStatus.APPROVED, page=1, limit=2)
        )
        assert page.total == 5
        assert page.pages == 3
        assert [item.amount for item in page.items] == [Decimal("50"), Decimal("40")]
        assert page.items[0].source_user_name == "Иван Иванов"

        by_level = await service.get_commissions(partner.id, CommissionQuery(level=2))
        assert [item.status for item in by_level.items] == ["PENDING"]

        ranged = await service.get_commissions(
            partner.id,
            CommissionQuery(
                from_date=datetime(2026, 10, 2, tzinfo=UTC),
                to_date=datetime(2026, 10, 3, tzinfo=UTC),
            ),
        )
        assert [item.amount for item in ranged.items] == [Decimal("30"), Decimal("20")]

    @pytest.mark.asyncio
    async def test_withdrawal_history_net_amount(self, db_session, make_user, add_commission):
        """Withdrawals expose net amount and filter by status."""
        partner = await make_user()
        source = await make_user()
        await add_commission(partner.id, source.id, "1000")
        service = PartnerService(db_session)
        await service.ledger.create_withdrawal(partner.id, Decimal("100"), TaxStatus.ENTREPRENEUR)

        page = await service.get_withdrawals(partner.id, WithdrawalQuery())
        assert page.total == 1
        item = page.items[0]
        assert item.tax_amount == Decimal("6.00")
        assert item.net_amount == Decimal("94.00")

        completed = await service.get_withdrawals(
            partner.id, WithdrawalQuery(status=WithdrawalStatus.COMPLETED)
        )
        assert completed.items == []
        assert completed.total == 0


class TestStaticViews:
    """Test levels listing, tax preview and team breakdown."""

    def test_partner_levels_listing(self, mock_session):
        """Benefits accumulate with the level."""
        levels = PartnerService(mock_session).get_partner_levels()

        assert [level.level for level in levels] == [1, 2, 3, 4, 5]
        assert levels[0].benefits == ["Базовые комиссии"]
        assert levels[2].benefits == [
            "Базовые комиссии", "Повышенная ставка комиссии", "Приоритетная поддержка",
        ]
        assert levels[4].benefits[-2:] == ["VIP статус", "Персональный менеджер"]
        assert levels[4].min_team_volume == Decimal("500000")

    def test_preview_tax(self, mock_session):
        """Preview wraps the tax calculator."""
        preview = PartnerService(mock_session).preview_tax("10000", "ENTREPRENEUR")
        assert preview.tax_amount == Decimal("600")
        assert preview.net_amount == Decimal("9400")

    @pytest.mark.asyncio
    async def test_team_by_level(self, db_session, make_chain):
        """Counts per relative level plus total."""
        users = await make_chain(4)

        team = await PartnerService(db_session).get_team_by_level(users[0].id)

        assert team.by_level == {1: 1, 2: 1, 3: 1, 4: 0, 5: 0}
        assert team.total == 3

    @pytest.mark.asyncio
    async def test_tree_view(self, db_session, make_chain):
        """The facade passes the requested depth to the tree builder."""
        a, b, c = await make_chain(3)

        tree = await PartnerService(db_session).get_tree(a.id, max_depth=2)

        assert tree.direct_count == 1
        assert tree.referrals[0].user_id == b.id
        assert tree.referrals[0].children[0].user_id == c.id
