"""Audit service for logging ledger lifecycle events."""

from sqlalchemy.ext.asyncio import AsyncSession

from syndic.models.audit_log import AuditLog


class AuditService:
    """Service for audit log operations.

    Provides a static method to create minimal audit log entries inside the
    caller's transaction.
    """

    @staticmethod
    async def log(
        session: AsyncSession,
        entity_type: str,
        entity_id: int,
        action: str,
        actor_id: str | None = None,
        changes: dict | None = None,
    ) -> AuditLog:
        """Create audit log entry (one-liner).

        Args:
            session: Database session
            entity_type: Type of entity ("bill", "remaining_payment", "apartment")
            entity_id: Primary key of the entity
            action: Action performed ("create", "validate", "balance_credit", etc.)
            actor_id: User who performed the action (optional)
            changes: Optional JSON snapshot of changed fields

        Returns:
            Created AuditLog object
        """
        audit = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor_id=actor_id,
            changes=changes,
        )
        session.add(audit)
        return audit


__all__ = ["AuditService"]
