from .audit import AuditLog, now_ms
from .logging import build_log_context, log_event, set_log_level

__all__ = ["AuditLog", "build_log_context", "log_event", "now_ms", "set_log_level"]
