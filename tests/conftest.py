"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest

from review_queue.config import Settings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep the developer's own config and REVIEW_QUEUE_* variables out of tests."""
    for name in list(os.environ):
        if name.startswith("REVIEW_QUEUE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("REVIEW_QUEUE_CONFIG_PATH", str(tmp_path / "missing-config.json"))


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        token="secret-token",
        languages=("en-us",),
        certified_projects={"145": "Dog Breed Classifier", "276": "Boston Housing"},
    )


@pytest.fixture()
def pty_terminal():
    """A pseudo terminal: write keystrokes to the master fd, read them from the stream."""
    if not hasattr(os, "openpty"):
        pytest.skip("pseudo terminals are not available on this platform")
    master, slave = os.openpty()
    stream = open(slave, "rb", buffering=0, closefd=False)
    yield master, stream
    stream.close()
    os.close(slave)
    os.close(master)
