"""
Heuristic structural checks for plugin source files.

These are plain-text heuristics, not a parser: delimiters inside string
literals and comments are counted like any other character. They exist to
catch gross corruption such as truncated files.
"""

from __future__ import annotations

import re
from pathlib import Path

from package_checklist import DEFAULT_RULES, StructureRules


class SourceReadError(Exception):
    """Raised when a source file cannot be located or read as UTF-8 text."""


def read_failure(error: SourceReadError) -> str:
    """Format a read failure as a defect message."""
    return f"Failed to read file: {error}"


def source_exists(file_path: Path) -> bool:
    """Check whether a source file is present.

    A missing file or a missing parent directory is reported as absent.
    Any other stat failure (unsearchable parent, name too long) is a read
    failure, not a missing file.

    Raises:
        SourceReadError: If the path cannot be inspected.
    """
    try:
        file_path.stat()
    except (FileNotFoundError, NotADirectoryError):
        return False
    except PermissionError:
        raise SourceReadError("Permission denied reading file") from None
    except OSError as e:
        raise SourceReadError(f"Cannot read file: {e.strerror or e}") from None
    return True


def read_source(file_path: Path) -> str:
    """Read a source file as UTF-8 text.

    Raises:
        SourceReadError: With a human-readable reason on any read failure.
    """
    try:
        return file_path.read_text(encoding="utf-8")
    except PermissionError:
        raise SourceReadError("Permission denied reading file") from None
    except UnicodeDecodeError as e:
        raise SourceReadError(
            f"File is not valid UTF-8 (byte {e.start}: {e.reason})"
        ) from None
    except OSError as e:
        raise SourceReadError(f"Cannot read file: {e.strerror or e}") from None


def check_balance(content: str, opening: str, closing: str, name: str) -> str | None:
    open_count = content.count(opening)
    close_count = content.count(closing)
    if open_count != close_count:
        return f"Unbalanced {name}: {open_count} {opening} vs {close_count} {closing}"
    return None


def check_syntax(content: str, rules: StructureRules = DEFAULT_RULES) -> list[str]:
    """Run every structural heuristic against file content.

    All checks run, so one call reports every defect at once.

    Args:
        content: Raw file text
        rules: Tokens for the type-definition and directive checks

    Returns:
        List of defect messages (empty when the file looks clean)
    """
    errors: list[str] = []

    for opening, closing, name in (("{", "}", "braces"), ("(", ")", "parentheses")):
        error = check_balance(content, opening, closing, name)
        if error:
            errors.append(error)

    # At least one complete type block anywhere in the file is enough
    keyword = re.escape(rules.type_keyword)
    if re.search(rf"{keyword}\s+\w+.*\{{.*\}}", content, re.DOTALL):
        pass
    elif f"{rules.type_keyword} " in content:
        errors.append(f"Incomplete {rules.type_keyword} definition detected")

    if rules.sentinel_symbol in content and rules.required_directive not in content:
        errors.append(f"Missing '{rules.required_directive}' directive")

    return errors


def check_file(file_path: Path, rules: StructureRules = DEFAULT_RULES) -> list[str]:
    """Read a file and run the structural checks on it."""
    try:
        content = read_source(file_path)
    except SourceReadError as e:
        return [read_failure(e)]
    return check_syntax(content, rules)
