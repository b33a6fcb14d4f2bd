"""
Audit Logger

DESIGN DECISION: Every significant action around the ledger is logged:
dashboard/list loads, rows rejected at ingestion, records created or
deleted, default categories seeded.

The audit logger:
- Is async to match the storage seam
- Gracefully handles storage failures (never crashes a flow because logging failed)
- Supports correlation IDs to trace related events

The pure aggregation/filter core never logs.
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from ledger.config import get_settings
from ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from ledger.models.transaction import RejectedRecord
from ledger.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("ledger.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_transactions_loaded(
        self,
        user_id: str,
        accepted: int,
        rejected: int,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.transactions_loaded(
            user_id=user_id,
            accepted=accepted,
            rejected=rejected,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_rejected(
        self,
        user_id: str,
        rejected: RejectedRecord,
        correlation_id: UUID,
    ) -> None:
        """Log a row that was kept out of the snapshot."""
        record_id = rejected.record.get("id")
        event = AuditEventBuilder.transaction_rejected(
            user_id=user_id,
            index=rejected.index,
            record_id=str(record_id) if record_id is not None else None,
            issues=[
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in rejected.issues
            ],
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_validation_failed(
        self,
        user_id: str,
        form: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.validation_failed(
            user_id=user_id,
            form=form,
            issues=issues,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_created(
        self,
        user_id: str,
        transaction_id: str,
        transaction_type: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.transaction_created(
            user_id=user_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_deleted(
        self,
        user_id: str,
        transaction_id: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.transaction_deleted(
            user_id=user_id,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_category_created(
        self,
        user_id: str,
        category_id: UUID,
        name: str,
        category_type: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.category_created(
            user_id=user_id,
            category_id=category_id,
            name=name,
            category_type=category_type,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_category_deleted(
        self,
        user_id: str,
        category_id: UUID,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.category_deleted(
            user_id=user_id,
            category_id=category_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_default_categories_seeded(
        self,
        user_id: str,
        count: int,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.default_categories_seeded(
            user_id=user_id,
            count=count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            user_id=user_id,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., opening the dashboard).
    Pass it through all subsequent operations.
    """
    return uuid4()


def configure_logging() -> int:
    """
    Apply LEDGER_LOG_LEVEL to the "ledger" loggers.

    LEDGER_DEBUG_MODE forces DEBUG. Returns the level that was set.
    """
    app = get_settings().app
    level = logging.DEBUG if app.debug_mode else logging.getLevelName(app.log_level)
    logging.getLogger("ledger").setLevel(level)
    return level
