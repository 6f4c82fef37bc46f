import json
from typing import List, Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship
from scout.models.base import CreatedAtMixin

if TYPE_CHECKING:
    from scout.models.report import Report


def decode_string_list(raw: str) -> List[str]:
    """Decode a JSON column that must hold a list of strings. Raises ValueError otherwise."""
    value = json.loads(raw)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"expected a JSON list of strings, got {type(value).__name__}")
    return value


class ContentMemory(CreatedAtMixin, table=True):
    """One report's contribution to a topic's history. Never updated after insert."""
    __table_args__ = {"extend_existing": True}
    id: Optional[int] = Field(default=None, primary_key=True)
    topic: str = Field(index=True, description="Case-sensitive topic key")
    content_hash: str = Field(index=True, description="sha256 of the normalized key findings")
    key_findings_json: str = Field(default="[]")  # JSON list of finding strings
    source_urls_json: str = Field(default="[]")  # JSON list of absolute URLs
    report_id: str = Field(foreign_key="report.id", index=True)

    report: Optional["Report"] = Relationship(back_populates="memories")

    @property
    def key_findings(self) -> List[str]:
        return decode_string_list(self.key_findings_json)

    @property
    def source_urls(self) -> List[str]:
        return decode_string_list(self.source_urls_json)
