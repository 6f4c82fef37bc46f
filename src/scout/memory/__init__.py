"""
Content memory and novelty detection.

Components:
- extract: findings and source URLs from raw report content
- hashing: order-independent content hash of a finding set
- store: MemoryStore contract and its SQLModel implementation
- novelty: NoveltyDetector, classifies a report against a topic's history
- processor: MemoryProcessor, persists history and requests notifications
"""
from scout.memory.extract import extract_key_findings, extract_source_urls, normalize_finding
from scout.memory.hashing import generate_content_hash
from scout.memory.store import MemoryStore, SQLMemoryStore
from scout.memory.novelty import NoveltyDetector, NoveltyVerdict, detect_novel_content
from scout.memory.processor import MemoryProcessor, MemoryResult, build_notification, process_report_memory

__all__ = [
    "extract_key_findings",
    "extract_source_urls",
    "normalize_finding",
    "generate_content_hash",
    "MemoryStore",
    "SQLMemoryStore",
    "NoveltyDetector",
    "NoveltyVerdict",
    "detect_novel_content",
    "MemoryProcessor",
    "MemoryResult",
    "build_notification",
    "process_report_memory",
]
