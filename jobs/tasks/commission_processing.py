"""
Commission processing task.

Intake of "transaction completed" events from the payments subsystem.
Delivery is at-least-once; the commission engine makes redelivery a no-op.
"""

from decimal import Decimal

import dramatiq
from loguru import logger

from jobs.async_runner import create_local_session, run_async
from jobs.broker import MAX_RETRIES
from partner_engine.services.partner.commission_engine import (
    CommissionBatchResult,
    CommissionEngine,
)
from partner_engine.utils.money import to_decimal


@dramatiq.actor(queue_name="commissions", max_retries=MAX_RETRIES, time_limit=60_000)
def process_completed_transaction(
    transaction_id: str, purchaser_user_id: int, amount: str
) -> None:
    """
    Create partner commissions for a completed transaction.

    Args:
        transaction_id: Payment transaction ID
        purchaser_user_id: Paying user
        amount: Transaction amount as a decimal string
    """
    logger.info(
        f"Processing completed transaction {transaction_id} "
        f"(user {purchaser_user_id}, amount {amount})"
    )

    # PersistenceFailure propagates so the Retries middleware redelivers
    result = run_async(
        _process_completed_transaction_async(
            transaction_id, purchaser_user_id, to_decimal(amount)
        )
    )

    logger.info(
        f"Transaction {transaction_id}: {result.created_count} commissions "
        f"created, {result.duplicates_skipped} already recorded"
    )


async def _process_completed_transaction_async(
    transaction_id: str, purchaser_user_id: int, amount: Decimal
) -> CommissionBatchResult:
    """Async implementation of commission processing."""
    async with create_local_session() as session:
        engine = CommissionEngine(session)
        return await engine.on_transaction_completed(
            transaction_id, purchaser_user_id, amount
        )
