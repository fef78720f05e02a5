"""
Integration tests for the commission processing actor.

The actor body runs synchronously through run_async against a file
SQLite database, the way a worker thread would execute it.
"""

import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from jobs import async_runner
from jobs.async_runner import run_async
from jobs.tasks import commission_processing
from partner_engine.models import AuditLog, Base, PartnerCommission, User
from partner_engine.services.partner.closure_maintainer import ClosureMaintainer
from partner_engine.utils.referral_codes import generate_referral_code


@pytest.fixture
def worker_db(tmp_path, monkeypatch):
    """File database shared by setup code and the actor."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'worker.db'}", poolclass=NullPool
    )
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @asynccontextmanager
    async def local_session():
        async with session_maker() as session:
            yield session

    monkeypatch.setattr(commission_processing, "create_local_session", local_session)

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    run_async(create_tables())
    yield session_maker

    run_async(engine.dispose())
    async_runner.get_event_loop().close()
    asyncio.set_event_loop(None)


def seed_chain(session_maker) -> tuple[int, int, int]:
    """Create A -> B -> C and return their ids."""

    async def _seed():
        async with session_maker() as session:
            users = [
                User(
                    email=f"worker{i}@example.com",
                    first_name=f"W{i}",
                    referral_code=generate_referral_code(),
                )
                for i in range(3)
            ]
            session.add_all(users)
            await session.commit()
            maintainer = ClosureMaintainer(session)
            await maintainer.attach_referral(users[1].id, users[0].id)
            await maintainer.attach_referral(users[2].id, users[1].id)
            return tuple(user.id for user in users)

    return run_async(_seed())


def count_rows(session_maker, model, **filters) -> int:
    async def _count():
        async with session_maker() as session:
            stmt = select(func.count()).select_from(model).filter_by(**filters)
            return (await session.execute(stmt)).scalar_one()

    return run_async(_count())


class TestProcessCompletedTransaction:
    """Test the dramatiq actor body."""

    def test_creates_commissions_once(self, worker_db):
        """Redelivered event creates nothing new."""
        a_id, b_id, c_id = seed_chain(worker_db)

        commission_processing.process_completed_transaction.fn("tx-worker-1", c_id, "1000.00")
        commission_processing.process_completed_transaction.fn("tx-worker-1", c_id, "1000.00")

        assert count_rows(worker_db, PartnerCommission, source_transaction_id="tx-worker-1") == 2
        assert count_rows(worker_db, PartnerCommission, partner_id=b_id, level=1) == 1
        assert count_rows(worker_db, PartnerCommission, partner_id=a_id, level=2) == 1
        assert count_rows(worker_db, AuditLog, entity_id="tx-worker-1") == 1

    def test_amounts_follow_depth_rates(self, worker_db):
        """Level 1 earns 10%, level 2 earns 5%."""
        a_id, b_id, c_id = seed_chain(worker_db)

        commission_processing.process_completed_transaction.fn("tx-worker-2", c_id, "1000.00")

        async def _amounts():
            async with worker_db() as session:
                result = await session.execute(
                    select(PartnerCommission.partner_id, PartnerCommission.amount)
                )
                return dict(result.all())

        assert run_async(_amounts()) == {b_id: Decimal("100.00"), a_id: Decimal("50.00")}

    def test_purchaser_without_referrer(self, worker_db):
        """No upline means no commissions and no audit entry."""
        a_id, _, _ = seed_chain(worker_db)

        commission_processing.process_completed_transaction.fn("tx-worker-3", a_id, "500")

        assert count_rows(worker_db, PartnerCommission) == 0
        assert count_rows(worker_db, AuditLog) == 0
