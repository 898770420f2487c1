"""
Tests for the inspection annotation stripper.

Verifies that:
1. Query lines (`// ^?`) are removed.
2. Cut markers drop the setup above, the tail below and enclosed regions.
3. Handbook flags are removed while include/filename directives and ts pragmas stay.
"""

from codetoggle.core.annotations import strip_inspection_annotations


def test_query_lines_removed():
  code = "const a = 1\n//    ^?\nconst b = 2"
  assert strip_inspection_annotations(code) == "const a = 1\nconst b = 2"


def test_cut_drops_setup():
  code = "import { ref } from 'vue'\n// ---cut---\nconst a = ref(1)"
  assert strip_inspection_annotations(code) == "const a = ref(1)"


def test_last_cut_wins():
  code = "a()\n// ---cut---\nb()\n// ---cut-before---\nc()"
  assert strip_inspection_annotations(code) == "c()"


def test_cut_after_drops_tail():
  assert strip_inspection_annotations("a()\n// ---cut-after---\nb()") == "a()"


def test_cut_region_removed():
  code = "a()\n// ---cut-start---\nhidden()\n// ---cut-end---\nb()"
  assert strip_inspection_annotations(code) == "a()\nb()"


def test_flags_removed_directives_kept():
  code = "// @errors: 2322\n// @noErrors\n// @filename: a.ts\n// @ts-expect-error\nconst a: string = 1"
  expected = "// @filename: a.ts\n// @ts-expect-error\nconst a: string = 1"
  assert strip_inspection_annotations(code) == expected


def test_plain_code_unchanged():
  code = "// regular comment\nconst a = 1"
  assert strip_inspection_annotations(code) == code
