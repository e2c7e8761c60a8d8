# Core models
from crashify.models.user import User
from crashify.models.assessment import Assessment
from crashify.models.uploaded_file import UploadedFile
from crashify.models.email_filter import EmailFilter
from crashify.models.email_log import EmailLog
from crashify.models.audit_log import AuditLog

__all__ = [
    "User",
    "Assessment",
    "UploadedFile",
    "EmailFilter",
    "EmailLog",
    "AuditLog",
]
