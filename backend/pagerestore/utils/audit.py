from flask import g
from pagerestore.extensions import db
from pagerestore.models.audit_log import AuditLog
from typing import Optional


def log_action(
    *,
    action: str,
    entity_type: str,
    entity_id: Optional[int],
    payload: dict | None = None
):
    if getattr(g, "current_tenant", None) is None or getattr(g, "current_user", None) is None:
        return  # Anonymous requests are not audited
    log = AuditLog()

    log.actor_id = g.current_user.id
    log.tenant_id = g.current_tenant.id
    log.action = action
    log.entity_type = entity_type
    log.entity_id = entity_id
    log.payload = payload or {}

    db.session.add(log)
