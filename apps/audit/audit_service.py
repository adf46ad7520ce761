"""
Centralized audit logging service.

Use log_action() to record any money movement or moderation decision.
It never raises, so an audit failure will never break the calling request.

Usage:
    from apps.audit.audit_service import log_action, AuditAction

    log_action(
        action=AuditAction.WALLET_TRANSFER,
        target_type="Wallet",
        target_id=wallet.id,
        target_label=f"Transfer {amount} to {recipient_id}",
        performed_by=user_id,
        context={"amount": str(amount)},
    )
"""
import logging
from uuid import UUID
from typing import Optional

from django.db import transaction

from .models import AuditLog

logger = logging.getLogger(__name__)


class AuditAction:
    """
    Canonical string constants for audit log actions.
    """
    # ── Identity ──────────────────────────────────────────────────────
    USER_LOGIN = "USER_LOGIN"

    # ── Wallet ────────────────────────────────────────────────────────
    WALLET_TRANSFER = "WALLET_TRANSFER"
    WITHDRAWAL_REQUESTED = "WITHDRAWAL_REQUESTED"
    WITHDRAWAL_PROCESSED = "WITHDRAWAL_PROCESSED"

    # ── Payments ──────────────────────────────────────────────────────
    PAYMENT_STATUS_CHANGED = "PAYMENT_STATUS_CHANGED"
    PAYMENT_DELETED = "PAYMENT_DELETED"
    DEPOSIT_REQUEST_PROCESSED = "DEPOSIT_REQUEST_PROCESSED"

    # ── Subscriptions / Gifts ─────────────────────────────────────────
    PACKAGE_PURCHASED = "PACKAGE_PURCHASED"
    GIFT_SENT = "GIFT_SENT"

    # ── Moderation ────────────────────────────────────────────────────
    REPORT_STATUS_CHANGED = "REPORT_STATUS_CHANGED"
    COMMENT_MODERATED = "COMMENT_MODERATED"


def log_action(
    *,
    action: str,
    target_type: str,
    target_id: UUID,
    performed_by=None,
    target_label: str = "",
    context: Optional[dict] = None,
) -> Optional[AuditLog]:
    """
    Create an AuditLog entry for a critical action.

    Never raises. Runs in its own savepoint so a failed insert does not
    poison an enclosing transaction.

    Args:
        action:        Action constant from AuditAction.
        target_type:   Human-readable type of the object acted on (e.g. "Wallet").
        target_id:     Primary key of the object acted on.
        performed_by:  User instance, user id, or None for system actions.
        target_label:  Optional human-readable description of the object.
        context:       Optional dict of additional metadata to store as JSON.

    Returns:
        The created AuditLog instance, or None if creation failed.
    """
    performed_by_id = getattr(performed_by, 'id', performed_by)
    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                action=action,
                target_type=target_type,
                target_id=target_id,
                target_label=target_label[:255],
                performed_by_id=performed_by_id,
                context=context or {},
            )
    except Exception:
        logger.exception(f"Failed to write audit log {action} for {target_type} {target_id}")
        return None
