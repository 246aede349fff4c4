"""End-to-end tests for the mdbundle command line."""

import pytest

from mdbundle import __version__
from mdbundle.bundler import FILE_OVERHEAD
from mdbundle.cli import main, parse_size


class TestParseSize:
    def test_parse_bytes(self):
        assert parse_size("1024") == 1024

    def test_parse_kb(self):
        assert parse_size("1KB") == 1024

    def test_parse_mb(self):
        assert parse_size("100MB") == 100 * 1024**2

    def test_parse_lowercase_with_spaces(self):
        assert parse_size(" 2 mb ") == 2 * 1024**2

    def test_parse_float(self):
        assert parse_size("1.5GB") == int(1.5 * 1024**3)

    def test_invalid_format(self):
        with pytest.raises(ValueError):
            parse_size("lots")


class TestMain:
    def test_single_root_bundle(self, make_tree, tmp_path, capsys):
        root = make_tree({"a.md": "# A\n", "sub/b.md": "# B\n", "notes.txt": "no"})
        out = tmp_path / "context.md"
        main([str(root), "-o", str(out)])
        text = out.read_text(encoding="utf-8")
        assert "- [a.md](#amd)\n- [sub/b.md](#subbmd)\n" in text
        assert "notes.txt" not in text
        assert "bundled 2 files to" in capsys.readouterr().err

    def test_default_root_is_cwd_and_rerun_is_stable(self, make_tree, monkeypatch):
        root = make_tree({"a.md": "a\n", "sub/b.md": "b\n"})
        monkeypatch.chdir(root)
        main([])
        first = (root / "context.md").read_bytes()
        main([])
        assert (root / "context.md").read_bytes() == first
        assert b"SOURCE: context.md" not in first

    def test_multiple_roots_with_label_collision(self, make_tree, tmp_path, monkeypatch):
        make_tree({"a.md": "a\n"}, name="docs")
        make_tree({"b.md": "b\n"}, name="lib/docs")
        monkeypatch.chdir(tmp_path)
        main(["docs", "--dir", "lib/docs", "-o", "out.md"])
        text = (tmp_path / "out.md").read_text(encoding="utf-8")
        assert "### docs\n- [docs/a.md](#docsamd)\n" in text
        assert "### lib-docs\n- [lib-docs/b.md](#lib-docsbmd)\n" in text
        assert "<!-- SOURCE: lib-docs/b.md -->" in text

    def test_overlapping_roots_warn_and_dedupe(self, make_tree, tmp_path, capsys):
        outer = make_tree({"top.md": "t\n", "inner/a.md": "a\n"}, name="outer")
        out = tmp_path / "context.md"
        main([str(outer), str(outer / "inner"), "-o", str(out)])
        err = capsys.readouterr().err
        assert "is inside" in err
        text = out.read_text(encoding="utf-8")
        assert text.count("<!-- SOURCE:") == 2
        assert "<!-- SOURCE: outer/inner/a.md -->" in text

    def test_max_size_splits_output(self, make_tree, tmp_path):
        root = make_tree({f"f{i}.md": "x" * (500 - FILE_OVERHEAD) for i in range(5)})
        out = tmp_path / "bundle.md"
        main([str(root), "-o", str(out), "--max-size", "1000"])
        names = sorted(p.name for p in tmp_path.glob("bundle*.md"))
        assert names == ["bundle_part1.md", "bundle_part2.md", "bundle_part3.md"]

    def test_files_named_like_output_parts_are_skipped_with_warning(self, make_tree, capsys):
        root = make_tree({"a.md": "a\n", "context_part2.md": "mine\n"})
        main([str(root), "-o", str(root / "context.md")])
        err = capsys.readouterr().err
        assert "context_part2.md" in err
        assert "warning" in err
        text = (root / "context.md").read_text(encoding="utf-8")
        assert "SOURCE: context_part2.md" not in text
        assert "<!-- SOURCE: a.md -->" in text

    def test_invalid_max_size(self, make_tree, capsys):
        root = make_tree({"a.md": ""})
        with pytest.raises(SystemExit) as excinfo:
            main([str(root), "--max-size", "huge"])
        assert excinfo.value.code == 2

    def test_non_positive_max_size(self, make_tree):
        root = make_tree({"a.md": ""})
        with pytest.raises(SystemExit) as excinfo:
            main([str(root), "--max-size", "0"])
        assert excinfo.value.code == 2

    def test_ignore_file_in_root(self, make_tree, tmp_path):
        root = make_tree(
            {
                "a.md": "a\n",
                "important.md": "i\n",
                "drafts/d.md": "d\n",
                ".mdbundleignore": "*.md\n!important.md\n",
            }
        )
        out = tmp_path / "context.md"
        main([str(root), "-o", str(out)])
        text = out.read_text(encoding="utf-8")
        assert "<!-- SOURCE: important.md -->" in text
        assert text.count("<!-- SOURCE:") == 1

    def test_extra_ignore_file_applies_after_root_rules(self, make_tree, tmp_path):
        root = make_tree({"a.md": "a\n", "b.md": "b\n", ".mdbundleignore": "!b.md\n"})
        extra = tmp_path / "extra-ignore"
        extra.write_text("b.md\n", encoding="utf-8")
        out = tmp_path / "context.md"
        main([str(root), "-o", str(out), "--ignore-file", str(extra)])
        text = out.read_text(encoding="utf-8")
        assert "SOURCE: b.md" not in text
        assert "SOURCE: a.md" in text

    def test_missing_extra_ignore_file(self, make_tree, tmp_path, capsys):
        root = make_tree({"a.md": ""})
        with pytest.raises(SystemExit) as excinfo:
            main([str(root), "--ignore-file", str(tmp_path / "nope")])
        assert excinfo.value.code == 1
        assert "does not exist" in capsys.readouterr().err

    def test_no_markdown_files(self, make_tree, tmp_path, capsys):
        root = make_tree({"readme.txt": "x"})
        out = tmp_path / "context.md"
        main([str(root), "-o", str(out)])
        assert "no markdown files found" in capsys.readouterr().err
        assert not out.exists()

    def test_missing_root(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([str(tmp_path / "missing"), "-o", str(tmp_path / "c.md")])
        assert excinfo.value.code == 1
        assert "does not exist" in capsys.readouterr().err
        assert not (tmp_path / "c.md").exists()

    def test_root_is_not_a_directory(self, tmp_path, capsys):
        target = tmp_path / "a.md"
        target.write_text("a")
        with pytest.raises(SystemExit) as excinfo:
            main([str(target)])
        assert excinfo.value.code == 1
        assert "is not a directory" in capsys.readouterr().err

    def test_unreadable_file_is_skipped(self, make_tree, tmp_path, capsys):
        root = make_tree({"a.md": "a\n", "b.md": "b\n"})
        (root / "broken.md").symlink_to(root / "gone.md")
        out = tmp_path / "context.md"
        main([str(root), "-o", str(out)])
        err = capsys.readouterr().err
        assert "could not read broken.md" in err
        text = out.read_text(encoding="utf-8")
        assert text.count("<!-- SOURCE:") == 2

    def test_verbose_output(self, make_tree, tmp_path, capsys):
        root = make_tree({"a.md": "a\n"})
        main([str(root), "-o", str(tmp_path / "c.md"), "-v"])
        err = capsys.readouterr().err
        assert "Scanning" in err
        assert "found 1 markdown files" in err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])
        assert excinfo.value.code == 0
        assert f"mdbundle {__version__}" in capsys.readouterr().out
