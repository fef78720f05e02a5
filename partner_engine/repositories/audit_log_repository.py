"""
Audit log repository.

Append-only writes of audit entries.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from partner_engine.models.audit_log import AuditLog
from partner_engine.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    """Audit log repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize audit log repository."""
        super().__init__(AuditLog, session)

    async def record(
        self,
        action: str,
        entity_type: str,
        entity_id: str | int,
        new_value: dict[str, Any] | None = None,
    ) -> AuditLog:
        """
        Append an audit entry to the current transaction.

        Args:
            action: Action name (e.g. PARTNER_COMMISSIONS_CREATED)
            entity_type: Audited entity type
            entity_id: Audited entity ID
            new_value: JSON-serializable payload

        Returns:
            Created entry
        """
        return await self.create(
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            new_value=new_value,
        )
