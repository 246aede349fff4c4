"""
mdbundle - A tool for bundling Markdown files for LLM ingestion.

This package discovers Markdown files under one or more directory roots,
filters them with gitignore-style ``.mdbundleignore`` patterns and built-in
exclusions, and concatenates them into one or more size-bounded documents
with a generated table of contents.
"""

__version__ = "0.1.0"
__author__ = "mdbundle Team"
