"""Report model describing the outcome of a tag checkout."""
from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

TOOL_VERSION = "0.1.0"


class CheckoutReport(BaseModel):
    """Record of a completed tag checkout.

    Captures what was requested (tag), what it resolved to
    (resolved_commit, tag_object) and how the working tree was narrowed
    (sparse_applied, removed_entries).
    """

    schema_version: str = Field(default="checkout_report_v1")
    repo_path: str = Field(..., description="Working directory that was checked out")
    tag: str = Field(..., description="Requested tag name")
    resolved_commit: str = Field(..., description="Commit SHA the tag points to")
    tag_object: str = Field(..., description="SHA of the annotated tag object")
    sparse_applied: bool = Field(default=False, description="True if a sparse-checkout file was found")
    removed_entries: List[str] = Field(default_factory=list, description="Top-level entries pruned")
    checked_out_at: str = Field(..., description="ISO8601 timestamp of the checkout")
    tool_version: str = Field(default=TOOL_VERSION)

    @field_validator("resolved_commit", "tag_object")
    @classmethod
    def validate_sha(cls, v: str) -> str:
        """Ensure the value looks like a git SHA."""
        if len(v) < 7 or len(v) > 40:
            raise ValueError(f"must be 7-40 hex characters; got '{v}' (len={len(v)})")
        if not all(c in "0123456789abcdef" for c in v.lower()):
            raise ValueError(f"must be hexadecimal; got '{v}'")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "schema_version": "checkout_report_v1",
                "repo_path": "/srv/deploy/app",
                "tag": "v1.4.0",
                "resolved_commit": "abc123def456abc123def456abc123def456abc1",
                "tag_object": "0123456789abcdef0123456789abcdef01234567",
                "sparse_applied": True,
                "removed_entries": ["docs", "tests"],
                "checked_out_at": "2026-10-19T10:30:00+00:00",
                "tool_version": TOOL_VERSION,
            }
        }
    )

    def save(self, path: Path) -> None:
        """Write report to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2))

    @classmethod
    def load(cls, path: Path) -> "CheckoutReport":
        path = Path(path)
        return cls.model_validate_json(path.read_text())
