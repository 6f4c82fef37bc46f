import uuid
from typing import List, Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship
from scout.models.base import CreatedAtMixin

if TYPE_CHECKING:
    from scout.models.memory import ContentMemory
    from scout.models.notification import Notification


def new_report_id() -> str:
    return uuid.uuid4().hex


class Report(CreatedAtMixin, table=True):
    """A generated research report. Owns the memory records and notifications derived from it."""
    __table_args__ = {"extend_existing": True}
    id: str = Field(default_factory=new_report_id, primary_key=True)
    topic: str = Field(index=True)
    html_content: str
    markdown_content: Optional[str] = None

    # Deleting a report deletes its history contribution
    memories: List["ContentMemory"] = Relationship(
        back_populates="report",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    notifications: List["Notification"] = Relationship(
        back_populates="report",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
