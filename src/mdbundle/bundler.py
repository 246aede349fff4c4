"""
Assemble discovered Markdown files into one or more bundle documents.

Layout of every written part::

    # Bundled Context
    <blank>
    ## Table of Contents
    - [display/path.md](#displaypathmd)
    <blank>
    ---
    <blank>
    <a id="displaypathmd"></a>
    <!-- SOURCE: display/path.md -->
    ...verbatim file bytes...

Parts are bounded by an estimated size (content plus a fixed per-file
overhead). A part is never empty, so a single file larger than the limit is
written on its own.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from . import console
from .errors import NothingToBundleError, OutputError
from .walker import DiscoveredFile

DEFAULT_MAX_SIZE = 100 * 1024 * 1024
# Rough size of the separator, anchor and source comment around each file.
FILE_OVERHEAD = 100

HEADER = "# Bundled Context"

_ANCHOR_STRIP = re.compile(r"[^a-z0-9\-_]")
_PART_SUFFIX = re.compile(r"_part\d+$")


@dataclass(frozen=True)
class BundleEntry:
    display_path: str
    label: str
    content: bytes


@dataclass
class BundlePart:
    entries: List[BundleEntry] = field(default_factory=list)
    size: int = 0

    def add(self, entry: BundleEntry) -> None:
        self.entries.append(entry)
        self.size += len(entry.content) + FILE_OVERHEAD

    @property
    def labels(self) -> List[str]:
        """Source labels in first-seen order."""
        return list(dict.fromkeys(e.label for e in self.entries))


def path_to_anchor(path: str) -> str:
    """Turn a display path into an in-document link target.

    ``"chapters/Chapter 1.md"`` -> ``"chapterschapter1md"``. Distinct paths
    may collapse to the same anchor.
    """
    anchor = path.lower().replace("/", "").replace("\\", "")
    return _ANCHOR_STRIP.sub("", anchor)


def display_path(f: DiscoveredFile, multi_root: bool) -> str:
    return f"{f.source_label}/{f.path}" if multi_root else f.path


def read_files(files: Sequence[DiscoveredFile], multi_root: bool) -> List[BundleEntry]:
    """Read every file; unreadable ones are reported and left out."""
    entries: List[BundleEntry] = []
    for f in files:
        shown = display_path(f, multi_root)
        try:
            content = f.abs_path.read_bytes()
        except OSError as e:
            console.warn(f"could not read {shown}: {e}")
            continue
        entries.append(BundleEntry(shown, f.source_label, content))
    return entries


def partition(entries: Sequence[BundleEntry], max_size: int = DEFAULT_MAX_SIZE) -> List[BundlePart]:
    """Split *entries*, in order, into parts whose estimated size fits *max_size*."""
    parts: List[BundlePart] = []
    current = BundlePart()
    for entry in entries:
        cost = len(entry.content) + FILE_OVERHEAD
        if current.entries and current.size + cost > max_size:
            parts.append(current)
            current = BundlePart()
        current.add(entry)
    if current.entries:
        parts.append(current)
    return parts


def part_paths(out_path: Path, count: int) -> List[Path]:
    """``context.md`` stays as is for one part, else ``context_part1.md``, ..."""
    if count == 1:
        return [out_path]
    return [
        out_path.with_name(f"{out_path.stem}_part{i}{out_path.suffix}")
        for i in range(1, count + 1)
    ]


def is_output_path(path: Path, out_path: Path) -> bool:
    """True if *path* is *out_path* or one of its ``_partN`` siblings."""
    if path == out_path:
        return True
    return (
        path.parent == out_path.parent
        and path.suffix == out_path.suffix
        and _PART_SUFFIX.sub("", path.stem) == out_path.stem
        and path.stem != out_path.stem
    )


def _toc_line(display: str) -> str:
    return f"- [{display}](#{path_to_anchor(display)})"


def render_part(part: BundlePart, index: int = 1, total: int = 1) -> bytes:
    """Serialize *part* to the bytes of one output document."""
    title = HEADER if total == 1 else f"{HEADER} (Part {index} of {total})"
    toc: List[str] = [title, "", "## Table of Contents"]

    labels = part.labels
    if len(labels) > 1:
        grouped: Dict[str, List[str]] = {label: [] for label in labels}
        for e in part.entries:
            grouped[e.label].append(_toc_line(e.display_path))
        for label, lines in grouped.items():
            toc += ["", f"### {label}"] + lines
    else:
        toc += [_toc_line(e.display_path) for e in part.entries]
    toc.append("")

    chunks: List[bytes] = [("\n".join(toc) + "\n").encode("utf-8")]
    for e in part.entries:
        section = (
            f"---\n\n"
            f'<a id="{path_to_anchor(e.display_path)}"></a>\n'
            f"<!-- SOURCE: {e.display_path} -->\n"
        )
        chunks.append(section.encode("utf-8"))
        chunks.append(e.content)
        if not e.content.endswith(b"\n"):
            chunks.append(b"\n")
        chunks.append(b"\n")
    return b"".join(chunks)


def bundle(
    files: Sequence[DiscoveredFile],
    out_path: Path,
    max_size: int = DEFAULT_MAX_SIZE,
    verbose: bool = False,
    multi_root: Optional[bool] = None,
) -> List[Path]:
    """Read, partition and write *files*; return the written part paths.

    Raises :class:`NothingToBundleError` if no file could be read and
    :class:`OutputError` (carrying the parts already written) if a part
    cannot be written. Display paths are label-prefixed when *multi_root*
    is set; by default that is the case when *files* span several roots.
    """
    if multi_root is None:
        multi_root = len({f.source_dir for f in files}) > 1
    entries = read_files(files, multi_root)
    if not entries:
        raise NothingToBundleError("Nothing to bundle: none of the files could be read")
    if verbose and len(entries) != len(files):
        console.info(f"{len(entries)} of {len(files)} files read")

    parts = partition(entries, max_size)
    targets = part_paths(out_path, len(parts))

    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputError(f"Could not create output directory '{out_path.parent}': {e}")

    written: List[Path] = []
    for index, (part, target) in enumerate(zip(parts, targets), start=1):
        if verbose:
            console.info(
                f"Writing {target} ({len(part.entries)} files, ~{part.size} bytes) …"
            )
        try:
            with target.open("wb") as out_fh:
                out_fh.write(render_part(part, index, len(parts)))
        except OSError as e:
            raise OutputError(f"Could not write to output file '{target}': {e}", written)
        written.append(target)
    return written
