"""
Gitignore-style pattern matching for ``.mdbundleignore`` files.

Each non-blank, non-comment line becomes one :class:`IgnoreRule`. Rules are
evaluated in file order and the last rule that matches a path decides
whether it is ignored, so a later ``!pattern`` can re-include what an earlier
pattern excluded regardless of which pattern is more specific.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

import pathspec

from .errors import ConfigFileError

IGNORE_FILENAME = ".mdbundleignore"


@dataclass(frozen=True)
class IgnoreRule:
    """One compiled pattern line."""

    pattern: str
    spec: "pathspec.PathSpec"
    negation: bool = False
    basename_only: bool = False

    def matches(self, rel_path: str) -> bool:
        target = rel_path.rsplit("/", 1)[-1] if self.basename_only else rel_path
        return self.spec.match_file(target)


@dataclass
class Matcher:
    """Ordered rule list answering "is this relative path ignored?"."""

    rules: List[IgnoreRule] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rules)

    def is_ignored(self, rel_path: str) -> bool:
        rel_path = rel_path.replace("\\", "/")
        ignored = False
        for rule in self.rules:
            if rule.matches(rel_path):
                ignored = not rule.negation
        return ignored

    def extend(self, other: "Matcher") -> "Matcher":
        """Return a new matcher whose rules are ours followed by *other*'s."""
        return Matcher(self.rules + other.rules)


def _compile_line(line: str) -> Optional[IgnoreRule]:
    negation = line.startswith("!")
    if negation:
        line = line[1:]

    basename_only = "/" not in line

    # Directory-only and root-anchor markers do not change the match scope.
    pattern = line
    if pattern.endswith("/"):
        pattern = pattern[:-1]
    if pattern.startswith("/"):
        pattern = pattern[1:]
    if not pattern:
        return None

    # Anchor full-path rules so a single-segment pattern does not float to any depth.
    source = pattern if basename_only else "/" + pattern
    try:
        spec = pathspec.PathSpec.from_lines("gitignore", [source])
    except ValueError:
        return None
    return IgnoreRule(pattern, spec, negation, basename_only)


def compile_rules(lines: Iterable[str]) -> Matcher:
    """Compile gitignore-style *lines*; malformed patterns are skipped."""
    rules: List[IgnoreRule] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        rule = _compile_line(line)
        if rule is not None:
            rules.append(rule)
    return Matcher(rules)


def load_ignore_file(path: Path) -> Matcher:
    """Compile the ignore file at *path*.

    A missing file yields a matcher that never ignores anything. Any other
    read failure raises :class:`ConfigFileError`.
    """
    try:
        with path.open("r", encoding="utf-8") as fh:
            return compile_rules(fh)
    except FileNotFoundError:
        return Matcher()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read ignore file '{path}': {e}")
