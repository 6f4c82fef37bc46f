import hashlib
from typing import Iterable

from scout.memory.extract import normalize_finding

FINDING_SEPARATOR = "|"


def generate_content_hash(findings: Iterable[str]) -> str:
    """
    Order-independent sha256 fingerprint of a finding set.

    Findings are normalized (case and whitespace) and sorted before hashing,
    so the same set of findings always yields the same 64-char hex digest.
    """
    normalized = sorted(normalize_finding(f) for f in findings)
    return hashlib.sha256(FINDING_SEPARATOR.join(normalized).encode("utf-8")).hexdigest()
