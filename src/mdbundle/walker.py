"""
Markdown discovery across one or more root directories.

Files are returned ordered by depth (shallower first) and then by relative
path. When several roots are walked, each root gets a unique display label
and files reachable from more than one root are kept only once, attributed
to the first root that produced them.
"""

from __future__ import annotations

import os
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

from .errors import InvalidRootError, WalkError
from .ignore import IGNORE_FILENAME, Matcher, load_ignore_file

DEFAULT_EXCLUSIONS: FrozenSet[str] = frozenset({".git", "node_modules", "vendor"})
MARKDOWN_SUFFIX = ".md"

MatcherFactory = Callable[[str], Matcher]


@dataclass(frozen=True)
class DiscoveredFile:
    """A Markdown file found under a root."""

    path: str  # relative to source_dir, "/"-separated
    depth: int
    source_dir: Path
    source_label: str

    @property
    def abs_path(self) -> Path:
        return self.source_dir / self.path


def validate_root(root: str) -> Path:
    """Return the absolute form of *root* or raise :class:`InvalidRootError`."""
    try:
        resolved = Path(root).resolve()
    except (OSError, RuntimeError) as e:
        raise InvalidRootError(f"Could not resolve root path '{root}': {e}")
    if not resolved.exists():
        raise InvalidRootError(f"Root directory '{root}' does not exist")
    if not resolved.is_dir():
        raise InvalidRootError(f"Root path '{root}' is not a directory")
    return resolved


def _sort_key(f: DiscoveredFile) -> Tuple[int, str]:
    return f.depth, f.path


def walk(
    root: str,
    matcher: Optional[Matcher] = None,
    label: Optional[str] = None,
) -> List[DiscoveredFile]:
    """Recursively collect Markdown files under *root*.

    ``.git``, ``node_modules``, ``vendor`` and hidden directories are never
    descended into, nor is any directory *matcher* ignores. Hidden files and
    ignored files are skipped.
    """
    abs_root = validate_root(root)
    if label is None:
        label = derive_label(root)

    def _fail(err: OSError) -> None:
        raise WalkError(f"Could not walk directory '{root}': {err}") from err

    files: List[DiscoveredFile] = []
    for dirpath, dirnames, filenames in os.walk(abs_root, onerror=_fail):
        rel_dir = Path(dirpath).relative_to(abs_root).as_posix()
        prefix = "" if rel_dir == "." else rel_dir + "/"

        kept_dirs = []
        for name in dirnames:
            if name in DEFAULT_EXCLUSIONS or name.startswith("."):
                continue
            if matcher is not None and matcher.is_ignored(prefix + name):
                continue
            kept_dirs.append(name)
        # prune in place so os.walk never enters the skipped subtrees
        dirnames[:] = kept_dirs

        for name in filenames:
            if name.startswith("."):
                continue
            if not name.lower().endswith(MARKDOWN_SUFFIX):
                continue
            rel = prefix + name
            if matcher is not None and matcher.is_ignored(rel):
                continue
            files.append(DiscoveredFile(rel, rel.count("/"), abs_root, label))

    files.sort(key=_sort_key)
    return files


def default_matcher_factory(root: str) -> Matcher:
    return load_ignore_file(Path(root) / IGNORE_FILENAME)


def walk_multiple(
    roots: Sequence[str],
    matcher_factory: MatcherFactory = default_matcher_factory,
) -> List[DiscoveredFile]:
    """Walk every root in order and merge the results.

    Each root keeps its own depth/path ordering; roots are concatenated in
    argument order. A file whose absolute path was already produced by an
    earlier root is dropped.
    """
    if not roots:
        raise InvalidRootError("No directories specified")
    for root in roots:
        validate_root(root)

    labels = resolve_labels(roots)
    merged: List[DiscoveredFile] = []
    seen = set()
    for root in roots:
        matcher = matcher_factory(root)
        for f in walk(root, matcher, labels[root]):
            key = os.path.normpath(str(f.abs_path))
            if key in seen:
                continue
            seen.add(key)
            merged.append(f)
    return merged


def detect_overlaps(dirs: Sequence[str]) -> List[Tuple[str, str]]:
    """Return ``(parent, child)`` pairs for roots nested inside one another."""
    absolute = [os.path.abspath(d).rstrip(os.sep) + os.sep for d in dirs]
    overlaps: List[Tuple[str, str]] = []
    for i in range(len(dirs)):
        for j in range(i + 1, len(dirs)):
            if absolute[j].startswith(absolute[i]):
                overlaps.append((dirs[i], dirs[j]))
            elif absolute[i].startswith(absolute[j]):
                overlaps.append((dirs[j], dirs[i]))
    return overlaps


# Labels

def derive_label(dir_path: str) -> str:
    """``"./docs"`` -> ``"docs"``, ``"/abs/path/specs"`` -> ``"specs"``."""
    return os.path.basename(os.path.normpath(dir_path)) or os.path.normpath(dir_path)


def resolve_labels(dirs: Sequence[str]) -> Dict[str, str]:
    """Map each directory to a display label unique within *dirs*.

    Colliding basenames are prefixed with their parent's name
    (``project1/docs`` -> ``project1-docs``). Without a usable parent the
    whole cleaned path is used with separators turned into hyphens, as it
    is for roots whose ``parent-base`` label still collides.
    """
    by_base: Dict[str, List[str]] = {}
    for d in dirs:
        by_base.setdefault(derive_label(d), []).append(d)

    labels: Dict[str, str] = {}
    for d in dirs:
        base = derive_label(d)
        if len(by_base[base]) == 1:
            labels[d] = base
            continue
        parent = os.path.basename(os.path.dirname(os.path.normpath(d)))
        if parent in ("", ".", os.sep):
            labels[d] = _path_label(d)
        else:
            labels[d] = f"{parent}-{base}"

    counts = Counter(labels.values())
    for d in dirs:
        if counts[labels[d]] > 1:
            labels[d] = _path_label(d)

    # A path label can still clash with another root's plain label.
    taken: Dict[str, str] = {}
    for d in labels:
        label = labels[d]
        n = 2
        while label in taken and taken[label] != d:
            label = f"{labels[d]}-{n}"
            n += 1
        taken[label] = d
        labels[d] = label
    return labels


def _path_label(dir_path: str) -> str:
    return os.path.normpath(dir_path).replace(os.sep, "-")
