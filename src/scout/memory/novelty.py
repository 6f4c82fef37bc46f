"""
Novelty Detector - decides whether a report says anything new for its topic.

Two tiers:
1. Exact duplicate: the normalized finding set hashes to a value already
   recorded for the topic. Cheap, and short-circuits everything else.
2. Delta: findings are compared against the findings of the most recent
   records, and source URLs against the URLs seen in a trailing window.
   A report that rephrases old material but adds one fact is still novel.
"""
from typing import List, Set

from pydantic import BaseModel, Field

from scout.config import settings
from scout.logging import logger
from scout.memory.extract import extract_key_findings, extract_source_urls, normalize_finding
from scout.memory.hashing import generate_content_hash
from scout.memory.store import MemoryStore


class NoveltyVerdict(BaseModel):
    """Result of comparing one report against a topic's history. Not persisted."""

    is_novel: bool
    novel_findings: List[str] = Field(default_factory=list)
    known_findings: List[str] = Field(default_factory=list)
    novel_urls: List[str] = Field(default_factory=list)
    content_hash: str

    # Everything extracted from the report, regardless of novelty
    findings: List[str] = Field(default_factory=list)
    source_urls: List[str] = Field(default_factory=list)


class NoveltyDetector:
    """
    Classifies report content as novel or already seen for a topic.

    Store failures propagate as ``MemoryStoreError``; detection never
    guesses without history.
    """

    def __init__(
        self,
        store: MemoryStore,
        recent_findings_limit: int | None = None,
        recent_url_days: int | None = None,
    ):
        """
        Args:
            store: History to compare against
            recent_findings_limit: Number of most recent records whose findings count as known
            recent_url_days: Trailing window (days) of source URLs that count as known
        """
        self.store = store
        self.recent_findings_limit = (
            settings.RECENT_FINDINGS_LIMIT if recent_findings_limit is None else recent_findings_limit
        )
        self.recent_url_days = settings.RECENT_URL_DAYS if recent_url_days is None else recent_url_days

    def _recent_findings(self, topic: str) -> Set[str]:
        known: Set[str] = set()
        for memory in self.store.get_content_memory(topic, self.recent_findings_limit):
            try:
                findings = memory.key_findings
            except (ValueError, TypeError) as e:
                logger.warning(f"Ignoring unreadable key_findings on content memory {memory.id}: {e}")
                continue
            known.update(normalize_finding(f) for f in findings)
        return known

    def detect(self, topic: str, raw_content: str) -> NoveltyVerdict:
        findings = extract_key_findings(raw_content)
        source_urls = extract_source_urls(raw_content)
        content_hash = generate_content_hash(findings)

        if self.store.has_content_hash(topic, content_hash):
            logger.debug(f"Exact duplicate for \"{topic}\" (hash {content_hash[:12]})")
            return NoveltyVerdict(
                is_novel=False,
                known_findings=findings,
                content_hash=content_hash,
                findings=findings,
                source_urls=source_urls,
            )

        recent_urls = self.store.get_recent_source_urls(topic, self.recent_url_days)
        novel_urls = [url for url in source_urls if url not in recent_urls]

        known = self._recent_findings(topic)
        novel_findings = [f for f in findings if normalize_finding(f) not in known]
        known_findings = [f for f in findings if normalize_finding(f) in known]

        verdict = NoveltyVerdict(
            is_novel=bool(novel_findings or novel_urls),
            novel_findings=novel_findings,
            known_findings=known_findings,
            novel_urls=novel_urls,
            content_hash=content_hash,
            findings=findings,
            source_urls=source_urls,
        )
        logger.debug(
            f"Novelty for \"{topic}\": {len(novel_findings)}/{len(findings)} findings, "
            f"{len(novel_urls)}/{len(source_urls)} urls new"
        )
        return verdict


def detect_novel_content(store: MemoryStore, topic: str, raw_content: str) -> NoveltyVerdict:
    """Run detection with the configured lookback windows."""
    return NoveltyDetector(store).detect(topic, raw_content)
