"""Shared fixtures for the cryptarithm tests."""

from __future__ import annotations

import pytest


@pytest.fixture
def trace_file(tmp_path):
    return tmp_path / "trace.json"
