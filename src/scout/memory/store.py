"""
Content memory store.

``MemoryStore`` is the narrow contract the novelty engine needs from
persistence. ``SQLMemoryStore`` implements it on a SQLModel session and
translates database failures into ``StoreReadError`` / ``StoreWriteError``.
"""
import json
from datetime import timedelta
from typing import List, Protocol, Sequence, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from scout.config import settings
from scout.errors import StoreReadError, StoreWriteError
from scout.logging import logger
from scout.memory.hashing import generate_content_hash
from scout.models.base import utcnow
from scout.models.memory import ContentMemory, decode_string_list


class MemoryStore(Protocol):
    def has_content_hash(self, topic: str, content_hash: str) -> bool: ...

    def get_recent_source_urls(self, topic: str, days_back: int) -> Set[str]: ...

    def get_content_memory(self, topic: str, limit: int) -> List[ContentMemory]: ...

    def save_content_memory(
        self,
        topic: str,
        content_hash: str,
        findings: Sequence[str],
        urls: Sequence[str],
        report_id: str,
    ) -> ContentMemory: ...


class SQLMemoryStore:
    """MemoryStore backed by the ``contentmemory`` table."""

    def __init__(self, session: Session):
        self.session = session

    def has_content_hash(self, topic: str, content_hash: str) -> bool:
        try:
            found = self.session.exec(
                select(ContentMemory.id).where(
                    ContentMemory.topic == topic,
                    ContentMemory.content_hash == content_hash,
                )
            ).first()
        except SQLAlchemyError as e:
            raise StoreReadError("has_content_hash", topic, str(e)) from e
        return found is not None

    def get_recent_source_urls(self, topic: str, days_back: int = settings.RECENT_URL_DAYS) -> Set[str]:
        """Union of source URLs recorded for ``topic`` in the last ``days_back`` days."""
        cutoff = utcnow() - timedelta(days=days_back)
        try:
            rows = self.session.exec(
                select(ContentMemory.id, ContentMemory.source_urls_json).where(
                    ContentMemory.topic == topic,
                    ContentMemory.created_at >= cutoff,
                )
            ).all()
        except SQLAlchemyError as e:
            raise StoreReadError("get_recent_source_urls", topic, str(e)) from e

        urls: Set[str] = set()
        for memory_id, raw in rows:
            try:
                urls.update(decode_string_list(raw))
            except (ValueError, TypeError) as e:
                logger.warning(f"Ignoring unreadable source_urls on content memory {memory_id}: {e}")
        return urls

    def get_content_memory(self, topic: str, limit: int = settings.RECENT_FINDINGS_LIMIT) -> List[ContentMemory]:
        """Most recent memory records for ``topic``, newest first."""
        try:
            return list(self.session.exec(
                select(ContentMemory)
                .where(ContentMemory.topic == topic)
                .order_by(col(ContentMemory.created_at).desc(), col(ContentMemory.id).desc())
                .limit(limit)
            ).all())
        except SQLAlchemyError as e:
            raise StoreReadError("get_content_memory", topic, str(e)) from e

    def save_content_memory(
        self,
        topic: str,
        content_hash: str,
        findings: Sequence[str],
        urls: Sequence[str],
        report_id: str,
    ) -> ContentMemory:
        """Insert and commit a memory record. The hash must be the hash of ``findings``."""
        if content_hash != generate_content_hash(findings):
            raise ValueError("content_hash does not match the given findings")

        memory = ContentMemory(
            topic=topic,
            content_hash=content_hash,
            key_findings_json=json.dumps(list(findings)),
            source_urls_json=json.dumps(list(urls)),
            report_id=report_id,
        )
        try:
            self.session.add(memory)
            self.session.commit()
            self.session.refresh(memory)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreWriteError(topic, report_id, str(e)) from e
        return memory
