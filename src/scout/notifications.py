"""
Notification records.

``SQLNotificationSink`` is what the memory processor calls when a report is
novel. The query helpers below serve whatever surfaces notifications to users.
"""
from datetime import timedelta
from typing import List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, func, select

from scout.config import settings
from scout.errors import NotificationError
from scout.logging import logger
from scout.models.base import utcnow
from scout.models.notification import Notification, NotificationType


class NotificationSink(Protocol):
    def create_notification(
        self,
        report_id: Optional[str],
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
    ) -> Notification: ...


class SQLNotificationSink:
    def __init__(self, session: Session):
        self.session = session

    def create_notification(
        self,
        report_id: Optional[str],
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
    ) -> Notification:
        notification = Notification(
            report_id=report_id,
            user_id=user_id,
            type=type,
            title=title,
            message=message,
        )
        try:
            self.session.add(notification)
            self.session.commit()
            self.session.refresh(notification)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise NotificationError(f"Creating notification for report {report_id} failed: {e}") from e
        return notification


def get_notifications(
    session: Session,
    user_id: str = settings.DEFAULT_USER_ID,
    unread_only: bool = False,
    limit: int = 50,
) -> List[Notification]:
    """Newest notifications for a user."""
    query = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.read == False)  # noqa: E712
    query = query.order_by(col(Notification.created_at).desc(), col(Notification.id).desc()).limit(limit)
    return list(session.exec(query).all())


def get_unread_notification_count(session: Session, user_id: str = settings.DEFAULT_USER_ID) -> int:
    return session.exec(
        select(func.count()).select_from(Notification).where(
            Notification.user_id == user_id,
            Notification.read == False,  # noqa: E712
        )
    ).one()


def mark_notification_read(session: Session, notification_id: int) -> None:
    notification = session.get(Notification, notification_id)
    if not notification:
        return
    notification.read = True
    session.add(notification)
    session.commit()


def mark_all_notifications_read(session: Session, user_id: str = settings.DEFAULT_USER_ID) -> int:
    """Mark every unread notification of a user as read. Returns how many changed."""
    unread = session.exec(
        select(Notification).where(
            Notification.user_id == user_id,
            Notification.read == False,  # noqa: E712
        )
    ).all()
    for notification in unread:
        notification.read = True
        session.add(notification)
    session.commit()
    return len(unread)


def delete_old_notifications(session: Session, days_old: int = settings.NOTIFICATION_RETENTION_DAYS) -> int:
    """Delete notifications older than ``days_old`` days. Returns how many were removed."""
    cutoff = utcnow() - timedelta(days=days_old)
    old = session.exec(select(Notification).where(Notification.created_at < cutoff)).all()
    for notification in old:
        session.delete(notification)
    session.commit()
    if old:
        logger.info(f"Purged {len(old)} notifications older than {days_old} days")
    return len(old)
