from scout.models.report import Report
from scout.models.memory import ContentMemory
from scout.models.notification import Notification, NotificationType

__all__ = [
    "Report",
    "ContentMemory",
    "Notification", "NotificationType",
]
