"""Integration tests: upload, publish and download through the Mhook facade."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from mhook.core.client import Mhook
from mhook.core.errors import PartialTreeFailure, TransferFailed, WaitTimeout
from mhook.models.coordinates import ArtifactCoordinate
from mhook.models.transfer import TransferOutcome


@pytest.fixture
def mhook(store) -> Mhook:
    return Mhook(store, wait_timeout=0.5)


class TestRoundTrip:
    def test_upload_then_download_is_byte_identical(
        self, mhook: Mhook, coord: ArtifactCoordinate, tmp_path: Path
    ):
        payload = os.urandom(64 * 1024)
        src = tmp_path / "src"
        src.mkdir()
        (src / "blob.bin").write_bytes(payload)

        mhook.upload(coord, src)
        mhook.download(coord.with_target("blob.bin"), tmp_path / "copy.bin")

        assert (tmp_path / "copy.bin").read_bytes() == payload

    def test_second_download_transfers_nothing(
        self, mhook: Mhook, store, coord: ArtifactCoordinate, artifact_dir: Path, tmp_path: Path
    ):
        mhook.upload(coord, artifact_dir)
        out = tmp_path / "out"

        first = mhook.download(coord, out)
        sent = store.bytes_sent
        snapshot = {p: p.read_bytes() for p in out.rglob("*") if p.is_file()}
        second = mhook.download(coord, out)

        assert first.transferred_count == 3
        assert second.transferred_count == 0
        assert second.not_modified_count == 3
        assert store.bytes_sent == sent
        assert {p: p.read_bytes() for p in out.rglob("*") if p.is_file()} == snapshot

    def test_changed_remote_is_refetched(
        self, mhook: Mhook, store, coord: ArtifactCoordinate, tmp_path: Path
    ):
        key = "app/main/abc123/bin/server"
        store.seed(key, b"v1")
        dest = tmp_path / "server"
        mhook.download(coord.with_target("bin/server"), dest)

        store.seed(key, b"v2")
        report = mhook.download(coord.with_target("bin/server"), dest)

        assert report.results[0].outcome == TransferOutcome.TRANSFERRED
        assert dest.read_bytes() == b"v2"


class TestPublishFlow:
    def test_publish_then_fetch_latest(
        self, mhook: Mhook, coord: ArtifactCoordinate, artifact_dir: Path, tmp_path: Path
    ):
        mhook.upload(coord, artifact_dir)
        mhook.publish_latest(coord, artifact_dir)

        assert mhook.head(coord) == "abc123"
        latest = ArtifactCoordinate(project="app", branch="main", target="bin/server")
        mhook.download(latest, tmp_path / "server")
        assert (tmp_path / "server").read_bytes() == b"server-binary"

    def test_republish_overwrites_head(
        self, mhook: Mhook, coord: ArtifactCoordinate, artifact_dir: Path
    ):
        mhook.publish_latest(coord, artifact_dir)
        mhook.publish_latest(coord.model_copy(update={"commit": "def456"}), artifact_dir)
        assert mhook.head(coord) == "def456"


class TestFailures:
    def test_partial_tree_keeps_completed_files(
        self, mhook: Mhook, store, coord: ArtifactCoordinate, tmp_path: Path
    ):
        for name in ("a", "b", "c"):
            store.seed(f"app/main/abc123/{name}", name.encode())
        store.fail_keys["app/main/abc123/b"] = TransferFailed("boom")

        with pytest.raises(PartialTreeFailure) as exc_info:
            mhook.download(coord, tmp_path)

        assert exc_info.value.key == "app/main/abc123/b"
        assert (tmp_path / "a").read_bytes() == b"a"
        assert not (tmp_path / "c").exists()

    def test_wait_for_missing_target(self, mhook: Mhook, coord: ArtifactCoordinate):
        with pytest.raises(WaitTimeout):
            mhook.wait(coord.with_target("never"))

    def test_wait_for_present_target(self, mhook: Mhook, store, coord: ArtifactCoordinate):
        store.seed("app/main/abc123/bin/server", b"x")
        mhook.wait(coord.with_target("bin/server"), timeout=1)
