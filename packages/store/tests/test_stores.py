"""Tests for prr-store implementations."""

from __future__ import annotations

import json

import pytest

from prr_store.base import MetadataStoreError
from prr_store.models import ReviewMetadata
from prr_store.sidecar import SidecarStore


@pytest.fixture
def review_path(tmp_path):
    path = tmp_path / "owner" / "repo" / "24.prr"
    path.parent.mkdir(parents=True)
    return path


# ---------------------------------------------------------------------------
# ReviewMetadata
# ---------------------------------------------------------------------------


class TestReviewMetadata:
    def test_to_dict(self):
        meta = ReviewMetadata(original="diff", submitted=5, commit_id="abc")
        assert meta.to_dict() == {"original": "diff", "submitted": 5, "commit_id": "abc"}

    def test_from_dict_missing_optional_fields(self):
        meta = ReviewMetadata.from_dict({"original": "diff"})
        assert meta.submitted is None
        assert meta.commit_id is None

    @pytest.mark.parametrize("data", [[], {"submitted": 1}, {"original": 3}])
    def test_from_dict_rejects_bad_shape(self, data):
        with pytest.raises(ValueError):
            ReviewMetadata.from_dict(data)


# ---------------------------------------------------------------------------
# SidecarStore
# ---------------------------------------------------------------------------


class TestSidecarStore:
    def test_path_is_hidden_sibling(self, review_path):
        assert SidecarStore().path(review_path) == review_path.parent / ".24"

    def test_save_and_load(self, review_path):
        store = SidecarStore()
        meta = ReviewMetadata(original="diff --git a/x b/x\n", submitted=None, commit_id="abc")
        store.save(review_path, meta)
        assert store.load(review_path) == meta

    def test_saved_format(self, review_path):
        store = SidecarStore()
        store.save(review_path, ReviewMetadata(original="d", submitted=1700000000))
        data = json.loads((review_path.parent / ".24").read_text())
        assert data == {"original": "d", "submitted": 1700000000, "commit_id": None}

    def test_save_replaces_and_leaves_no_temp_files(self, review_path):
        store = SidecarStore()
        store.save(review_path, ReviewMetadata(original="one"))
        store.save(review_path, ReviewMetadata(original="two"))
        assert store.load(review_path).original == "two"
        assert sorted(p.name for p in review_path.parent.iterdir()) == [".24"]

    def test_load_legacy_file(self, review_path):
        (review_path.parent / ".24").write_text(json.dumps({"original": "d", "submitted": None}))
        assert SidecarStore().load(review_path) == ReviewMetadata(original="d")

    def test_load_missing(self, review_path):
        with pytest.raises(FileNotFoundError):
            SidecarStore().load(review_path)

    def test_load_invalid_json(self, review_path):
        (review_path.parent / ".24").write_text("{")
        with pytest.raises(MetadataStoreError, match="not valid JSON"):
            SidecarStore().load(review_path)

    def test_load_wrong_schema(self, review_path):
        (review_path.parent / ".24").write_text(json.dumps({"submitted": 3}))
        with pytest.raises(MetadataStoreError):
            SidecarStore().load(review_path)

    def test_remove(self, review_path):
        store = SidecarStore()
        store.save(review_path, ReviewMetadata(original="d"))
        store.remove(review_path)
        assert not store.path(review_path).exists()
