from pathlib import Path
import os

import pytest

from prosign.src.core.exceptions import (
    BundleNotFoundError,
    InvalidArchiveLayout,
    PayloadNotFoundError,
)
from prosign.src.ipa.bundle_locator import find_app_bundle


def test_missing_payload(tmp_path: Path) -> None:
    with pytest.raises(PayloadNotFoundError, match="Payload not found"):
        find_app_bundle(tmp_path / "Payload")


def test_payload_without_bundle(tmp_path: Path) -> None:
    payload = tmp_path / "Payload"
    payload.mkdir()
    (payload / "README.txt").write_text("no app here")
    (payload / "App.appex").mkdir()

    with pytest.raises(BundleNotFoundError, match="No .app bundle in Payload"):
        find_app_bundle(payload)


def test_empty_payload(tmp_path: Path) -> None:
    payload = tmp_path / "Payload"
    payload.mkdir()
    with pytest.raises(InvalidArchiveLayout):
        find_app_bundle(payload)


def test_single_bundle(tmp_path: Path) -> None:
    payload = tmp_path / "Payload"
    (payload / "App.app").mkdir(parents=True)
    (payload / "notes.txt").write_text("x")

    assert find_app_bundle(payload) == payload / "App.app"


def test_multiple_bundles_use_listing_order(tmp_path: Path, monkeypatch) -> None:
    payload = tmp_path / "Payload"
    (payload / "First.app").mkdir(parents=True)
    (payload / "Second.app").mkdir()
    monkeypatch.setattr(os, "listdir", lambda _: ["Second.app", "First.app"])

    assert find_app_bundle(payload) == payload / "Second.app"
