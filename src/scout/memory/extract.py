"""
Finding and source extraction from raw report content.

Reports arrive as HTML produced by the research workflow. Findings are the
informative sentences of a report; sources are the absolute links it cites.
Neither function raises on malformed markup: no match simply means no result.
"""
import re
from typing import List

from scout.config import settings

TAG_RE = re.compile(r"<[^>]+>")
WHITESPACE_RE = re.compile(r"\s+")
SENTENCE_END_RE = re.compile(r"[.!?]+")
HREF_RE = re.compile(r'href="(https?://[^"]+)"')

# Decoded in this order, so "&amp;lt;" ends up as "<"
HTML_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#039;", "'"),
)


def strip_markup(raw_content: str) -> str:
    """Remove tags, decode the common entities and collapse whitespace."""
    text = TAG_RE.sub(" ", raw_content)
    for entity, char in HTML_ENTITIES:
        text = text.replace(entity, char)
    return WHITESPACE_RE.sub(" ", text).strip()


def normalize_finding(finding: str) -> str:
    """Comparison form of a finding: lowercased, single-spaced, trimmed."""
    return WHITESPACE_RE.sub(" ", finding.lower()).strip()


def extract_key_findings(
    raw_content: str,
    *,
    min_length: int | None = None,
    max_length: int | None = None,
    max_findings: int | None = None,
) -> List[str]:
    """
    Split a report into candidate findings.

    A finding is a sentence whose trimmed length is strictly between
    ``min_length`` and ``max_length``. Only the first ``max_findings``
    qualifying sentences are returned, in document order.
    """
    min_length = settings.MIN_FINDING_LENGTH if min_length is None else min_length
    max_length = settings.MAX_FINDING_LENGTH if max_length is None else max_length
    max_findings = settings.MAX_KEY_FINDINGS if max_findings is None else max_findings

    text = strip_markup(raw_content)
    sentences = (s.strip() for s in SENTENCE_END_RE.split(text))
    findings = [s for s in sentences if min_length < len(s) < max_length]
    return findings[:max_findings]


def extract_source_urls(raw_content: str) -> List[str]:
    """Distinct http(s) link targets, in first-seen order."""
    return list(dict.fromkeys(HREF_RE.findall(raw_content)))
