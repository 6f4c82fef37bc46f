"""
Memory Processor - the unit of work run once per generated report.

detect -> save memory record (always) -> notify (only when novel)

The memory record is written before any notification is attempted, so a
notification failure can never cost history. Store failures propagate;
notification failures are logged and reported as ``notification_created=False``.
"""
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from scout.config import settings
from scout.errors import NotificationError
from scout.logging import logger, report_id_ctx
from scout.memory.novelty import NoveltyDetector
from scout.memory.store import MemoryStore
from scout.models.notification import NotificationType
from scout.notifications import NotificationSink


class MemoryResult(BaseModel):
    is_novel: bool
    novel_findings: List[str] = Field(default_factory=list)
    notification_created: bool = False
    # Set when the report was novel but the notification could not be created
    notification_error: Optional[str] = None


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def build_notification(topic: str, novel_count: int, url_count: int) -> Tuple[str, str]:
    """Title and message announcing new findings and/or sources for a topic."""
    title = f'New findings for "{topic}"'
    if novel_count > 0:
        message = f"{_plural(novel_count, 'new finding')} detected"
        if url_count > 0:
            message += f" with {_plural(url_count, 'new source')}"
        message += "."
    else:
        message = f"{_plural(url_count, 'new source')} found."
    return title, message


class MemoryProcessor:
    def __init__(
        self,
        store: MemoryStore,
        notifier: NotificationSink,
        detector: Optional[NoveltyDetector] = None,
        default_user_id: Optional[str] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.detector = detector or NoveltyDetector(store)
        self.default_user_id = default_user_id or settings.DEFAULT_USER_ID

    def process(
        self,
        topic: str,
        report_id: str,
        raw_content: str,
        user_id: Optional[str] = None,
    ) -> MemoryResult:
        token = report_id_ctx.set(report_id)
        try:
            return self._process(topic, report_id, raw_content, user_id or self.default_user_id)
        finally:
            report_id_ctx.reset(token)

    def _process(self, topic: str, report_id: str, raw_content: str, user_id: str) -> MemoryResult:
        verdict = self.detector.detect(topic, raw_content)

        # History stays complete whether or not the report is novel
        self.store.save_content_memory(
            topic,
            verdict.content_hash,
            verdict.findings,
            verdict.source_urls,
            report_id,
        )

        result = MemoryResult(is_novel=verdict.is_novel, novel_findings=verdict.novel_findings)
        if not verdict.is_novel:
            logger.info(f"No novel content for \"{topic}\", skipping notification")
            return result

        novel_count = len(verdict.novel_findings)
        url_count = len(verdict.novel_urls)
        logger.info(f"Novel content for \"{topic}\": {novel_count} new findings, {url_count} new URLs")

        title, message = build_notification(topic, novel_count, url_count)
        try:
            self.notifier.create_notification(report_id, user_id, NotificationType.NEW_REPORT, title, message)
        except NotificationError as e:
            logger.warning(f"Memory saved but notification failed for \"{topic}\": {e}")
            result.notification_error = str(e)
            return result

        result.notification_created = True
        return result


def process_report_memory(
    store: MemoryStore,
    notifier: NotificationSink,
    topic: str,
    report_id: str,
    raw_content: str,
    user_id: Optional[str] = None,
) -> MemoryResult:
    """Run one report through detection, persistence and notification."""
    return MemoryProcessor(store, notifier).process(topic, report_id, raw_content, user_id)
