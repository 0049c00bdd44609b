"""
Audit trail helpers.

Every mutating API call records who did what to which row.
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.audit import AuditAction, AuditLog


async def log_action(
    db: AsyncSession,
    user_id: int,
    action: AuditAction,
    target_type: Optional[str] = None,
    target_id: Optional[int] = None,
    action_metadata: Optional[dict[str, Any]] = None,
    ip_address: Optional[str] = None,
) -> AuditLog:
    """
    Add an AuditLog row to the current transaction.

    Args:
        user_id: Acting user
        target_type: Kind of row affected (e.g. "product_sale", "payout")
        target_id: ID of the affected row
        action_metadata: Extra JSON context (amounts, domains, periods)
    """
    log_entry = AuditLog(
        user_id=user_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        action_metadata=action_metadata,
        ip_address=ip_address,
    )
    db.add(log_entry)
    # Committed together with the audited change by get_db
    return log_entry


def get_client_ip(request) -> Optional[str]:
    """Client address, honouring X-Forwarded-For behind a proxy."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    if getattr(request, "client", None):
        return request.client.host

    return None
