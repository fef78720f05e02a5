"""
Integration tests for commission creation.

Tests cover:
- Ancestor-bounded commissions on a 7-user chain
- Idempotency under redelivery
- Zero-rate levels
- Audit entry in the same unit of work
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from partner_engine.models import AuditLog, CommissionStatus, PartnerCommission
from partner_engine.repositories import PartnerCommissionRepository
from partner_engine.services.partner.commission_engine import CommissionEngine
from partner_engine.utils.datetime_utils import utc_now

from tests.factories import build_config


async def commissions_for(session, transaction_id):
    result = await session.execute(
        select(PartnerCommission)
        .where(PartnerCommission.source_transaction_id == transaction_id)
        .order_by(PartnerCommission.level)
    )
    return list(result.scalars().all())


async def audit_count(session):
    result = await session.execute(select(func.count()).select_from(AuditLog))
    return result.scalar()


class TestAncestorBounded:
    """Test commissions along a chain."""

    @pytest.mark.asyncio
    async def test_seven_chain_pays_five_ancestors(self, db_session, make_chain):
        """G's purchase pays F, E, D, C, B and never A."""
        users = await make_chain(7)
        a, b, c, d, e, f, g = users

        result = await CommissionEngine(db_session).on_transaction_completed(
            "tx-chain", g.id, Decimal("1000")
        )

        rows = await commissions_for(db_session, "tx-chain")
        assert [(row.partner_id, row.level, row.amount) for row in rows] == [
            (f.id, 1, Decimal("100.00")),
            (e.id, 2, Decimal("50.00")),
            (d.id, 3, Decimal("30.00")),
            (c.id, 4, Decimal("20.00")),
            (b.id, 5, Decimal("10.00")),
        ]
        assert a.id not in {row.partner_id for row in rows}
        assert all(row.status == CommissionStatus.PENDING for row in rows)
        assert all(row.source_user_id == g.id for row in rows)
        assert result.created_count == 5

    @pytest.mark.asyncio
    async def test_short_chain(self, db_session, make_chain):
        """Only existing ancestors are paid."""
        a, b = await make_chain(2)

        await CommissionEngine(db_session).on_transaction_completed("tx-short", b.id, Decimal("250"))

        rows = await commissions_for(db_session, "tx-short")
        assert [(row.partner_id, row.amount, row.rate) for row in rows] == [
            (a.id, Decimal("25.00"), Decimal("0.1000")),
        ]

    @pytest.mark.asyncio
    async def test_no_upline_writes_nothing(self, db_session, make_user):
        """A purchaser without referrer produces no rows and no audit entry."""
        solo = await make_user()

        result = await CommissionEngine(db_session).on_transaction_completed(
            "tx-solo", solo.id, Decimal("1000")
        )

        assert result.created_count == 0
        assert await commissions_for(db_session, "tx-solo") == []
        assert await audit_count(db_session) == 0


class TestIdempotency:
    """Test redelivery of the same completion event."""

    @pytest.mark.asyncio
    async def test_second_delivery_is_noop(self, db_session, make_chain):
        """Same rows, one audit entry, after two deliveries."""
        users = await make_chain(4)
        buyer = users[-1]
        engine = CommissionEngine(db_session)

        first = await engine.on_transaction_completed("tx-dup", buyer.id, Decimal("1000"))
        rows_after_first = [
            (row.id, row.partner_id, row.level, row.amount)
            for row in await commissions_for(db_session, "tx-dup")
        ]
        second = await engine.on_transaction_completed("tx-dup", buyer.id, Decimal("1000"))

        rows_after_second = [
            (row.id, row.partner_id, row.level, row.amount)
            for row in await commissions_for(db_session, "tx-dup")
        ]
        assert rows_after_second == rows_after_first
        assert first.created_count == 3
        assert second.created_count == 0
        assert second.duplicates_skipped == 3
        assert await audit_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_different_transactions_both_paid(self, db_session, make_chain):
        """Distinct transaction IDs are separate events."""
        a, b = await make_chain(2)
        engine = CommissionEngine(db_session)

        await engine.on_transaction_completed("tx-1", b.id, Decimal("100"))
        await engine.on_transaction_completed("tx-2", b.id, Decimal("100"))

        assert len(await commissions_for(db_session, "tx-1")) == 1
        assert len(await commissions_for(db_session, "tx-2")) == 1
        assert await audit_count(db_session) == 2

    @pytest.mark.asyncio
    async def test_conflicting_insert_is_ignored(self, db_session, make_chain):
        """The unique key turns a racing duplicate insert into a no-op."""
        a, b = await make_chain(2)
        repo = PartnerCommissionRepository(db_session)
        row = {
            "partner_id": a.id,
            "source_user_id": b.id,
            "source_transaction_id": "tx-race",
            "level": 1,
            "amount": Decimal("10.00"),
            "rate": Decimal("0.10"),
            "status": CommissionStatus.PENDING.value,
            "created_at": utc_now(),
        }

        first = await repo.insert_ignore_conflicts([row])
        second = await repo.insert_ignore_conflicts([row])
        await db_session.commit()

        assert len(first) == 1
        assert second == []
        assert len(await commissions_for(db_session, "tx-race")) == 1


class TestZeroSkip:
    """Test levels without a commission."""

    @pytest.mark.asyncio
    async def test_zero_rate_level_has_no_row(self, db_session, make_chain):
        """Depth 2 configured at 0 is skipped, depth 3 still paid."""
        a, b, c, d = await make_chain(4)
        config = build_config(
            commission_rates_by_depth={1: Decimal("0.10"), 2: Decimal("0"), 3: Decimal("0.03")}
        )

        result = await CommissionEngine(db_session, config).on_transaction_completed(
            "tx-zero", d.id, Decimal("1000")
        )

        rows = await commissions_for(db_session, "tx-zero")
        assert [(row.partner_id, row.level) for row in rows] == [(c.id, 1), (a.id, 3)]
        assert result.zero_skipped == 1

    @pytest.mark.asyncio
    async def test_audit_entry_summarizes_batch(self, db_session, make_chain):
        """The audit entry carries transaction, purchaser, amount and count."""
        a, b, c = await make_chain(3)

        await CommissionEngine(db_session).on_transaction_completed("tx-audit", c.id, Decimal("99.90"))

        entry = (await db_session.execute(select(AuditLog))).scalar_one()
        assert entry.entity_id == "tx-audit"
        assert entry.new_value == {
            "transactionId": "tx-audit",
            "purchaserUserId": c.id,
            "amount": "99.90",
            "commissionsCount": 2,
        }
