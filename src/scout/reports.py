"""Report CRUD. A report owns its content memory records and notifications."""
from typing import List, Optional

from sqlmodel import Session, col, select

from scout.errors import NotFoundError, ValidationError
from scout.logging import logger
from scout.models.report import Report


def save_report(
    session: Session,
    topic: str,
    html_content: str,
    markdown_content: Optional[str] = None,
) -> Report:
    if not topic or not topic.strip():
        raise ValidationError("Report topic is required", "topic")
    if not html_content or not html_content.strip():
        raise ValidationError("Report HTML content is required", "html_content")

    report = Report(topic=topic.strip(), html_content=html_content, markdown_content=markdown_content)
    session.add(report)
    session.commit()
    session.refresh(report)
    return report


def get_report(session: Session, report_id: str) -> Optional[Report]:
    return session.get(Report, report_id)


def get_reports_by_topic(session: Session, topic: str, limit: int = 50) -> List[Report]:
    return list(session.exec(
        select(Report)
        .where(Report.topic == topic)
        .order_by(col(Report.created_at).desc())
        .limit(limit)
    ).all())


def delete_report(session: Session, report_id: str) -> None:
    """Delete a report together with its memory records and notifications."""
    report = session.get(Report, report_id)
    if not report:
        raise NotFoundError("Report", report_id)
    session.delete(report)
    session.commit()


def clear_topic_reports(session: Session, topic: str) -> int:
    """Delete every report of a topic (and, through them, the topic's history)."""
    reports = session.exec(select(Report).where(Report.topic == topic)).all()
    for report in reports:
        session.delete(report)
    session.commit()
    if reports:
        logger.info(f"Cleared {len(reports)} reports for \"{topic}\"")
    return len(reports)
