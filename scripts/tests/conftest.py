"""Pytest configuration for plugin pre-flight validator tests."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Add scripts directory to Python path for imports
SCRIPTS_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(SCRIPTS_DIR))

from package_checklist import DEFAULT_CHECKLIST  # noqa: E402

STAT_SOURCE = """using System;
using UnityEngine;

namespace StatForge
{
    public class Stat
    {
        public float Value { get; private set; }
        public string Formula { get; set; }
        public event Action<float> OnValueChanged;

        public void AddModifier(float amount)
        {
            Value += amount;
            OnValueChanged?.Invoke(Value);
        }

        public static implicit operator float(Stat stat) => stat.Value;
    }
}
"""

GENERIC_SOURCE = """using UnityEngine;

namespace StatForge
{{
    public class {name}
    {{
        public void Run()
        {{
        }}
    }}
}}
"""

PackageBuilder = Callable[..., Path]


def source_for(relative_path: str) -> str:
    """Return conformant source text for a manifest entry."""
    if relative_path == DEFAULT_CHECKLIST.primary_file:
        return STAT_SOURCE
    return GENERIC_SOURCE.format(name=Path(relative_path).stem)


@pytest.fixture
def make_package(tmp_path: Path) -> PackageBuilder:
    """Build a package tree for the default checklist under tmp_path.

    Keyword overrides map a manifest path to replacement content: a str is
    written as UTF-8, bytes are written raw, and None leaves the file out.
    """

    def _make(overrides: dict[str, str | bytes | None] | None = None) -> Path:
        overrides = overrides or {}
        root = tmp_path / "package"
        for relative_path in DEFAULT_CHECKLIST.manifest:
            content = overrides.get(relative_path, source_for(relative_path))
            if content is None:
                continue
            target = root / relative_path
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        root.mkdir(exist_ok=True)
        return root

    return _make


@pytest.fixture
def conformant_package(make_package: PackageBuilder) -> Path:
    """A package tree where every check passes."""
    return make_package()


@pytest.fixture
def stat_source() -> str:
    """Conformant primary file source."""
    return STAT_SOURCE
