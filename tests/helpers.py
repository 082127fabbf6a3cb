"""Assertions shared by the test modules."""

from __future__ import annotations

from solver import extract_letters, is_valid_solution


def assert_sound(words, result, mapping):
    """Check that mapping is total, injective and arithmetically correct."""
    letters = extract_letters(words, result)
    assert set(mapping) == set(letters)
    assert len(set(mapping.values())) == len(mapping)
    assert all(0 <= d <= 9 for d in mapping.values())
    assert is_valid_solution(words, result, mapping)
