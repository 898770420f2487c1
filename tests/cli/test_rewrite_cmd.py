"""
Tests for the `rewrite` command.

Verifies that:
1. A single file is rewritten to --out, or to stdout without --out.
2. Directories are mirrored into the --out directory.
3. --check writes nothing and fails when a file would change.
4. --strict turns a block failure into a non-zero exit.
5. Invalid settings and unknown backends fail cleanly.
6. Files that are not valid UTF-8 are reported and skipped; the rest are still written.
"""

from codetoggle.cli.__main__ import main

TYPED = "# useFoo\n\n```ts\nconst a: Ref<number> = ref(1)\n```\n"
PLAIN = "# useBar\n\n```ts\nconst a = 1\n```\n"
BROKEN = "# useBaz\n\n```ts\nconst a = {\n```\n"


def test_rewrite_single_file_to_out(tmp_path):
  infile = tmp_path / "page.md"
  infile.write_text(TYPED)
  outfile = tmp_path / "out.md"

  assert main(["rewrite", str(infile), "--out", str(outfile)]) == 0

  content = outfile.read_text()
  assert "<CodeToggle>" in content
  assert "```js\nconst a = ref(1)\n```" in content
  assert infile.read_text() == TYPED


def test_rewrite_single_file_to_stdout(tmp_path, capsys):
  infile = tmp_path / "page.md"
  infile.write_text(PLAIN)

  assert main(["rewrite", str(infile)]) == 0
  assert capsys.readouterr().out == PLAIN


def test_rewrite_directory(tmp_path):
  src = tmp_path / "docs"
  (src / "core" / "useFoo").mkdir(parents=True)
  (src / "core" / "useFoo" / "index.md").write_text(TYPED)
  (src / "guide.md").write_text(PLAIN)
  out = tmp_path / "built"

  assert main(["rewrite", str(src), "--out", str(out)]) == 0

  assert "<CodeToggle>" in (out / "core" / "useFoo" / "index.md").read_text()
  assert (out / "guide.md").read_text() == PLAIN


def test_directory_requires_out(tmp_path):
  (tmp_path / "a.md").write_text(PLAIN)
  assert main(["rewrite", str(tmp_path)]) == 1


def test_missing_input(tmp_path):
  assert main(["rewrite", str(tmp_path / "nope.md")]) == 1


def test_check_mode(tmp_path, recorded_console):
  typed = tmp_path / "typed.md"
  typed.write_text(TYPED)
  plain = tmp_path / "plain.md"
  plain.write_text(PLAIN)

  assert main(["rewrite", str(plain), "--check"]) == 0
  assert main(["rewrite", str(typed), "--check"]) == 1
  assert typed.read_text() == TYPED

  log = recorded_console.export_text()
  assert "Code Block Report" in log
  assert "1 file(s) would be rewritten" in log


def test_check_directory_without_out(tmp_path):
  (tmp_path / "plain.md").write_text(PLAIN)
  assert main(["rewrite", str(tmp_path), "--check"]) == 0


def test_broken_block_passes_through(tmp_path, recorded_console):
  infile = tmp_path / "broken.md"
  infile.write_text(BROKEN)
  outfile = tmp_path / "out.md"

  assert main(["rewrite", str(infile), "--out", str(outfile)]) == 0
  assert outfile.read_text() == BROKEN
  assert "[format]" in recorded_console.export_text()


def test_strict_mode_fails(tmp_path):
  infile = tmp_path / "broken.md"
  infile.write_text(BROKEN)
  outfile = tmp_path / "out.md"

  assert main(["rewrite", str(infile), "--out", str(outfile), "--strict"]) == 1
  assert not outfile.exists()


def test_unknown_backend(tmp_path, recorded_console):
  infile = tmp_path / "page.md"
  infile.write_text(PLAIN)

  assert main(["rewrite", str(infile), "--backend", "deno", "--check"]) == 1
  assert "Unknown backend 'deno'" in recorded_console.export_text()


def test_invalid_setting(tmp_path, recorded_console):
  infile = tmp_path / "page.md"
  infile.write_text(PLAIN)

  assert main(["rewrite", str(infile), "--check", "--config", "max_concurrency=0"]) == 1
  assert "Invalid configuration" in recorded_console.export_text()


def test_config_settings_applied(tmp_path):
  infile = tmp_path / "page.md"
  infile.write_text(TYPED)
  outfile = tmp_path / "out.md"

  assert main(["rewrite", str(infile), "--out", str(outfile), "--config", "toggle_tag=Toggle"]) == 0
  assert "<Toggle>" in outfile.read_text()


def test_undecodable_file_skipped(tmp_path, recorded_console):
  src = tmp_path / "docs"
  src.mkdir()
  (src / "guide.md").write_text(TYPED)
  (src / "latin1.md").write_bytes(b"# caf\xe9\n\n\xff\xfe bad\n")
  out = tmp_path / "built"

  assert main(["rewrite", str(src), "--out", str(out)]) == 1

  assert "<CodeToggle>" in (out / "guide.md").read_text()
  assert not (out / "latin1.md").exists()
  log = recorded_console.export_text()
  assert "Skipping" in log
  assert "latin1.md" in log


def test_undecodable_single_file(tmp_path, recorded_console):
  infile = tmp_path / "latin1.md"
  infile.write_bytes(b"\xff\xfe bad\n")

  assert main(["rewrite", str(infile), "--check"]) == 1
  assert "latin1.md" in recorded_console.export_text()
