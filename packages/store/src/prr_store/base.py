"""Abstract metadata store interface.

The review lifecycle depends on MetadataStore, not on a concrete backend, so
the sidecar format can change without touching review handling.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prr_store.models import ReviewMetadata


class MetadataStoreError(Exception):
    """Stored metadata exists but cannot be decoded."""


class MetadataStore(ABC):
    """Persistence for the metadata of one review file.

    Every method is keyed by the path of the user-facing review file. I/O
    failures propagate as OSError; undecodable data raises MetadataStoreError.
    """

    @abstractmethod
    def path(self, review_path: Path) -> Path:
        """Return where the metadata for ``review_path`` lives."""

    @abstractmethod
    def load(self, review_path: Path) -> ReviewMetadata:
        """Load metadata for a review. Raises FileNotFoundError if there is none."""

    @abstractmethod
    def save(self, review_path: Path, metadata: ReviewMetadata) -> None:
        """Persist metadata for a review, replacing what was there."""

    def remove(self, review_path: Path) -> None:
        """Delete the metadata for a review."""
        self.path(review_path).unlink()
