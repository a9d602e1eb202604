"""Review metadata model.

Decoupled from prr_core so the store layer has no knowledge of review files
beyond their path.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass
class ReviewMetadata:
    """Metadata kept next to a review file.

    Field names are the on-disk JSON keys and must not change: existing
    reviews are read back with them.
    """

    original: str  # untouched diff; used for corruption checks and snip resolution
    submitted: int | None = None  # epoch seconds of the last submission
    commit_id: str | None = None  # PR head commit when the review was fetched

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> ReviewMetadata:
        if not isinstance(data, dict) or not isinstance(data.get("original"), str):
            raise ValueError("metadata must be an object with a string 'original' field")
        return cls(
            original=data["original"],
            submitted=data.get("submitted"),
            commit_id=data.get("commit_id"),
        )
