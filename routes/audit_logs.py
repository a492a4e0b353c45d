from flask import Blueprint, current_app, jsonify, request
from models.audit_log import AuditLog

audit_bp = Blueprint("audit", __name__, url_prefix="/api")


@audit_bp.get("/audit-logs")
def list_audit_logs():
    limit_max = current_app.config.get("AUDIT_LOG_LIMIT_MAX", 500)
    limit = request.args.get("limit", type=int) or 200
    limit = max(1, min(limit, limit_max))

    action = request.args.get("action")
    entity_id = request.args.get("entity_id")

    q = AuditLog.query
    if action:
        q = q.filter(AuditLog.action == action)
    if entity_id:
        q = q.filter(AuditLog.entity_id == entity_id)

    rows = q.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
    return jsonify([r.to_dict() for r in rows]), 200
