"""
CLI entrypoint for mdbundle package.
"""
import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__, console
from .bundler import DEFAULT_MAX_SIZE, bundle, is_output_path
from .errors import BundlerError, ConfigFileError, OutputError
from .ignore import Matcher, load_ignore_file
from .walker import default_matcher_factory, detect_overlaps, walk_multiple


def parse_size(size_str: str) -> int:
    """
    Parse a human-readable size such as ``100MB``, ``1.5GB`` or ``1024``.

    Units are binary multiples. Raises ValueError on anything else.
    """
    size_str = size_str.strip().upper()
    try:
        return int(float(size_str))
    except ValueError:
        pass

    units = {"TB": 1024**4, "GB": 1024**3, "MB": 1024**2, "KB": 1024, "B": 1}
    for unit, multiplier in units.items():
        if size_str.endswith(unit):
            try:
                return int(float(size_str[: -len(unit)].strip()) * multiplier)
            except ValueError:
                continue
    raise ValueError(
        f"Invalid size format: '{size_str}'. "
        f"Use formats like '100MB', '1.5GB', '500KB', or plain numbers for bytes."
    )


def _max_size(value: str) -> int:
    try:
        size = parse_size(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))
    if size <= 0:
        raise argparse.ArgumentTypeError("max size must be positive")
    return size


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="mdbundle",
        description="Bundle Markdown files into size-bounded documents with a table of contents.",
    )
    p.add_argument("dirs", nargs="*", help="Root directories to scan (default: .)")
    p.add_argument(
        "-d",
        "--dir",
        dest="extra_dirs",
        action="append",
        default=[],
        help="Additional root directory (repeatable)",
    )
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("context.md"),
        help="Output file (default: context.md)",
    )
    p.add_argument(
        "--max-size",
        type=_max_size,
        default=DEFAULT_MAX_SIZE,
        help="Maximum estimated size per output part, e.g. 10MB (default 100MB)",
    )
    p.add_argument(
        "--ignore-file",
        type=Path,
        help="Extra ignore patterns applied after each root's .mdbundleignore",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def _roots(ns: argparse.Namespace) -> List[str]:
    roots = list(ns.dirs) + list(ns.extra_dirs)
    if not roots:
        roots = ["."]
    return [os.getcwd() if r == "." else r for r in roots]


def _load_extra(path: Path) -> Matcher:
    if not path.exists():
        raise ConfigFileError(f"Ignore file '{path}' does not exist")
    if not path.is_file():
        raise ConfigFileError(f"'{path}' is not a file")
    return load_ignore_file(path)


def main(argv: Optional[List[str]] = None) -> None:
    try:
        ns = _parse_args(argv)
        roots = _roots(ns)
        out_path = ns.output.resolve()

        try:
            matcher_factory = default_matcher_factory
            if ns.ignore_file:
                extra = _load_extra(ns.ignore_file.resolve())
                if ns.verbose:
                    console.info(f"Loaded {len(extra)} extra patterns from {ns.ignore_file}")

                def matcher_factory(root: str) -> Matcher:
                    return default_matcher_factory(root).extend(extra)

            for parent, child in detect_overlaps(roots):
                console.warn(f"{child} is inside {parent}; duplicate files will be skipped")

            if ns.verbose:
                console.info(f"Scanning {', '.join(roots)} …")
            files = walk_multiple(roots, matcher_factory)

            kept = []
            for f in files:
                if is_output_path(f.abs_path, out_path):
                    console.warn(f"skipping {f.abs_path}: it has the name of an output part")
                    continue
                kept.append(f)

            if not kept:
                console.warn("no markdown files found")
                return
            if ns.verbose:
                console.info(f"found {len(kept)} markdown files")

            written = bundle(
                kept,
                out_path,
                max_size=ns.max_size,
                verbose=ns.verbose,
                multi_root=len(roots) > 1,
            )
        except OutputError as e:
            console.error(str(e))
            if e.written:
                console.info(f"Completed parts: {', '.join(str(p) for p in e.written)}")
            sys.exit(1)
        except BundlerError as e:
            console.error(str(e))
            sys.exit(1)

        console.success(
            f"bundled {len(kept)} files to {', '.join(str(p) for p in written)}"
        )

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
