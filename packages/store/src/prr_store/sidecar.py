"""SidecarStore: metadata as a JSON dotfile next to the review file.

``owner/repo/24.prr`` keeps its metadata in ``owner/repo/.24``. The format is
a single JSON object with the fields of ReviewMetadata.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from prr_store.base import MetadataStore, MetadataStoreError
from prr_store.models import ReviewMetadata

logger = logging.getLogger(__name__)


class SidecarStore(MetadataStore):
    """Stores each review's metadata in a hidden file beside it."""

    def path(self, review_path: Path) -> Path:
        return review_path.with_name(f".{review_path.stem}")

    def load(self, review_path: Path) -> ReviewMetadata:
        path = self.path(review_path)
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise MetadataStoreError(f"{path} is not valid JSON: {e}") from e
        try:
            return ReviewMetadata.from_dict(data)
        except ValueError as e:
            raise MetadataStoreError(f"{path}: {e}") from e

    def save(self, review_path: Path, metadata: ReviewMetadata) -> None:
        """Write atomically using temp file + rename."""
        path = self.path(review_path)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(metadata.to_dict(), f)
            os.replace(tmp_path, path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        logger.debug("Wrote review metadata to %s", path)
