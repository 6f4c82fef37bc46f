from enum import Enum
from typing import Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship
from scout.models.base import CreatedAtMixin

if TYPE_CHECKING:
    from scout.models.report import Report


class NotificationType(str, Enum):
    NEW_REPORT = "new_report"
    WEEKLY_SUMMARY = "weekly_summary"


class Notification(CreatedAtMixin, table=True):
    __table_args__ = {"extend_existing": True}
    id: Optional[int] = Field(default=None, primary_key=True)
    report_id: Optional[str] = Field(default=None, foreign_key="report.id", index=True)
    user_id: str = Field(default="anonymous", index=True)

    type: NotificationType = Field(default=NotificationType.NEW_REPORT)
    title: str
    message: str
    read: bool = Field(default=False)

    report: Optional["Report"] = Relationship(back_populates="notifications")
