"""
API surface checks against the primary plugin file.

Presence-only: each expectation is a literal substring test. Extra members
in the file are never reported.
"""

from __future__ import annotations

from collections.abc import Iterable

from package_checklist import FeatureExpectation


def feature_presence(
    content: str, expectations: Iterable[FeatureExpectation]
) -> list[tuple[FeatureExpectation, bool]]:
    """Pair each expectation with whether its marker occurs in content."""
    return [(expectation, expectation.marker in content) for expectation in expectations]


def check_features(content: str, expectations: Iterable[FeatureExpectation]) -> list[str]:
    """Return labels of missing features, in expectation order."""
    return [
        expectation.label
        for expectation, present in feature_presence(content, expectations)
        if not present
    ]
