import os

import pytest

from analyzers.tag_scanner import (
    FileTagReport,
    TagKind,
    TagScanner,
    TagScanResult,
    extract_comments,
    scan_for_tags,
    summarize,
    top_files_by_tag_count,
)
from conftest import write_files
from core.scanner import FileEntry, scan_directory


def entry(path):
    return FileEntry.from_path(str(path), os.path.getsize(path))


def assert_consistent_totals(result: TagScanResult):
    assert result.total == len(result.todos) + len(result.fixmes) + len(result.hacks)
    assert result.file_count == len(result.file_details)
    assert all(report.todos or report.fixmes or report.hacks for report in result.file_details)


def test_scan_then_tag_skips_excluded_directories(tmp_path):
    write_files(tmp_path, {
        "a.js": "// TODO: fix this\nconsole.log(1);\n",
        "b.py": "# FIXME: broken\nprint(1)\n",
        "node_modules/x.js": "// HACK: nope\n",
    })

    result = scan_for_tags(scan_directory(tmp_path).files)

    assert result.total == 2
    assert [(m.file, m.comment) for m in result.todos] == [("a.js", "fix this")]
    assert [(m.file, m.comment) for m in result.fixmes] == [("b.py", "broken")]
    assert result.hacks == []
    assert result.file_count == 2
    assert_consistent_totals(result)


@pytest.mark.parametrize("line, expected", [
    ("// TODO: fix this", "fix this"),
    ("//TODO fix spacing", "fix spacing"),
    ("/* TODO: block style */", "block style"),
    ("/*TODO tight*/", "tight"),
    ("# TODO: hash style", "hash style"),
    ("x = 1  # todo: lower case", "lower case"),
    ("//   TODO:   padded   ", "padded"),
])
def test_comment_shapes(line, expected):
    assert extract_comments(line, TagKind.TODO) == [expected]


def test_every_occurrence_is_found():
    content = "// TODO: one\nint x; // TODO: two\n/* TODO: three */ # TODO: four\n"

    assert extract_comments(content, TagKind.TODO) == ["one", "two", "three", "four"]


def test_line_comment_takes_rest_of_line():
    assert extract_comments("// TODO: a /* b */", TagKind.TODO) == ["a /* b */"]


def test_block_comment_does_not_span_lines():
    assert extract_comments("/* TODO: start\nend */", TagKind.TODO) == []


def test_tag_without_comment_opener_is_ignored():
    assert extract_comments("TODO: not a comment", TagKind.TODO) == []


def test_each_kind_uses_its_own_keyword():
    content = "// FIXME: f\n# HACK: h\n// TODO: t\n"

    assert extract_comments(content, TagKind.FIXME) == ["f"]
    assert extract_comments(content, TagKind.HACK) == ["h"]
    assert extract_comments(content, TagKind.TODO) == ["t"]


def test_per_file_report_keeps_order(tmp_path):
    write_files(tmp_path, {"m.ts": "// TODO: first\n// FIXME: x\n// TODO: second\n"})

    result = TagScanner().scan_for_tags([entry(tmp_path / "m.ts")])

    report = result.file_details[0]
    assert report.todos == ["first", "second"]
    assert report.fixmes == ["x"]
    assert report.path == str(tmp_path / "m.ts")
    assert [m.kind for m in result.todos] == [TagKind.TODO, TagKind.TODO]


def test_zero_byte_source_file(tmp_path):
    write_files(tmp_path, {"empty.js": ""})

    result = scan_for_tags([entry(tmp_path / "empty.js")])

    assert result.total == 0
    assert result.file_details == []


def test_unrecognized_extension_is_never_opened(tmp_path, monkeypatch):
    write_files(tmp_path, {"data.bin": "// TODO: x"})
    scanner = TagScanner()
    opened = []
    monkeypatch.setattr(scanner, "scan_file", lambda f: opened.append(f))

    result = scanner.scan_for_tags([entry(tmp_path / "data.bin")])

    assert opened == []
    assert result.total == 0


def test_extension_match_is_case_insensitive(tmp_path):
    write_files(tmp_path, {"Main.JAVA": "// HACK: upper"})

    result = scan_for_tags([entry(tmp_path / "Main.JAVA")])

    assert [m.comment for m in result.hacks] == ["upper"]


def test_unreadable_files_are_skipped(tmp_path):
    write_files(tmp_path, {"ok.py": "# TODO: fine", "bad.py": b"# TODO: \xff\xfe broken"})
    files = [
        entry(tmp_path / "bad.py"),
        FileEntry(str(tmp_path / "gone.py"), "gone.py", 10, ".py"),
        entry(tmp_path / "ok.py"),
    ]

    result = scan_for_tags(files)

    assert [m.file for m in result.todos] == ["ok.py"]
    assert result.file_count == 1


def test_file_count_counts_files_not_matches(tmp_path):
    write_files(tmp_path, {"a.c": "// TODO: 1\n// TODO: 2\n// FIXME: 3\n", "b.c": "int main;\n"})

    result = scan_for_tags([entry(tmp_path / "a.c"), entry(tmp_path / "b.c")])

    assert result.total == 3
    assert result.file_count == 1
    assert_consistent_totals(result)


def make_result(*counts):
    result = TagScanResult()
    for i, (todos, fixmes, hacks) in enumerate(counts):
        result.file_details.append(FileTagReport(
            path=f"/p/f{i}.py", name=f"f{i}.py",
            todos=["t"] * todos, fixmes=["f"] * fixmes, hacks=["h"] * hacks,
        ))
    return result


def test_top_files_sorted_descending_with_stable_ties():
    result = make_result((1, 0, 0), (2, 1, 0), (0, 0, 1), (3, 0, 0))

    top = top_files_by_tag_count(result, 3)

    assert [(t.name, t.count) for t in top] == [("f1.py", 3), ("f3.py", 3), ("f0.py", 1)]
    assert (top[0].todos, top[0].fixmes, top[0].hacks) == (2, 1, 0)


def test_top_files_respects_limit_and_membership():
    result = make_result((1, 0, 0), (0, 1, 0))

    assert len(top_files_by_tag_count(result, 1)) == 1
    assert {t.path for t in top_files_by_tag_count(result, 10)} == {"/p/f0.py", "/p/f1.py"}
    assert top_files_by_tag_count(result, 0) == []


def test_summarize(tmp_path):
    write_files(tmp_path, {"a.rb": "# TODO: a\n# HACK: b\n", "b.go": "// FIXME: c\n"})

    summary = summarize(scan_for_tags(scan_directory(tmp_path).files))

    assert summary.to_dict() == {"total": 3, "todos": 1, "fixmes": 1, "hacks": 1, "filesWithComments": 2}
