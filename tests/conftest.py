"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Минимальные переменные окружения для тестов
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FILE", "logs/test.log")

# Добавить корень проекта в PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from datetime import UTC, datetime
from decimal import Decimal
from itertools import count
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from partner_engine.models import (
    Base,
    CommissionStatus,
    PartnerCommission,
    Transaction,
    TransactionStatus,
    User,
    WithdrawalRequest,
    WithdrawalStatus,
)
from partner_engine.services.partner.closure_maintainer import ClosureMaintainer
from partner_engine.utils.referral_codes import generate_referral_code

_ids = count(1)


@pytest.fixture
def mock_session():
    """Mock AsyncSession для тестов без БД."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    session.refresh = AsyncMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Session bound to the in-memory engine."""
    session_maker = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """Factory creating committed users."""

    async def _make_user(first_name: str = "Test", last_name: str | None = None) -> User:
        n = next(_ids)
        user = User(
            email=f"user{n}@example.com",
            first_name=first_name,
            last_name=last_name,
            referral_code=generate_referral_code(),
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_chain(db_session, make_user):
    """Factory creating a referral chain A -> B -> C ... (A is the top)."""

    async def _make_chain(length: int) -> list[User]:
        maintainer = ClosureMaintainer(db_session)
        users = [await make_user(first_name=f"U{i}") for i in range(length)]
        for referrer, referral in zip(users, users[1:]):
            await maintainer.attach_referral(referral.id, referrer.id)
        return users

    return _make_chain


@pytest.fixture
def add_transaction(db_session):
    """Factory recording a payments-side transaction."""

    async def _add_transaction(
        user_id: int,
        amount: str,
        status: TransactionStatus = TransactionStatus.COMPLETED,
    ) -> Transaction:
        tx = Transaction(
            id=f"tx-{next(_ids)}",
            user_id=user_id,
            amount=Decimal(amount),
            status=status.value,
        )
        db_session.add(tx)
        await db_session.commit()
        return tx

    return _add_transaction


@pytest.fixture
def add_commission(db_session):
    """Factory inserting a commission in a given status."""

    async def _add_commission(
        partner_id: int,
        source_user_id: int,
        amount: str,
        status: CommissionStatus = CommissionStatus.APPROVED,
        level: int = 1,
        created_at: datetime | None = None,
    ) -> PartnerCommission:
        commission = PartnerCommission(
            partner_id=partner_id,
            source_user_id=source_user_id,
            source_transaction_id=f"tx-{next(_ids)}",
            level=level,
            amount=Decimal(amount),
            rate=Decimal("0.10"),
            status=status.value,
            created_at=created_at or datetime.now(UTC),
        )
        db_session.add(commission)
        await db_session.commit()
        return commission

    return _add_commission


@pytest.fixture
def add_withdrawal(db_session):
    """Factory inserting a withdrawal in a given status."""

    async def _add_withdrawal(
        user_id: int,
        amount: str,
        status: WithdrawalStatus = WithdrawalStatus.PENDING,
    ) -> WithdrawalRequest:
        withdrawal = WithdrawalRequest(
            user_id=user_id,
            amount=Decimal(amount),
            status=status.value,
        )
        db_session.add(withdrawal)
        await db_session.commit()
        return withdrawal

    return _add_withdrawal
