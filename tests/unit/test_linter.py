from __future__ import annotations

import pytest

from ucp_schema.linter import FileStatus, Severity, lint, lint_file

pytestmark = [pytest.mark.unit, pytest.mark.lint]


def codes(result) -> list[str]:
    return [d.code for d in result.diagnostics]


def test_clean_file(write):
    p = write(
        "ok.json",
        {
            "$id": "https://ucp.dev/ok.json",
            "$defs": {"id": {"type": "string"}},
            "properties": {
                "id": {"$ref": "#/$defs/id", "ucp_request": {"create": "omit", "update": "required"}},
                "self": {"$ref": "#"},
                "remote": {"$ref": "https://ucp.dev/elsewhere.json"},
            },
        },
    )
    result = lint_file(p)
    assert result.status is FileStatus.OK
    assert result.diagnostics == []
    assert result.file.name == "ok.json"


def test_syntax_error_is_e001(tmp_path):
    p = tmp_path / "broken.json"
    p.write_text("{", encoding="utf-8")
    result = lint_file(p)
    assert result.status is FileStatus.ERROR
    assert codes(result) == ["E001"]
    assert result.diagnostics[0].path == "/"


def test_missing_ref_file_is_e002(write):
    p = write("a.json", {"$id": "a", "properties": {"b": {"$ref": "types/b.json"}}})
    result = lint_file(p)
    assert codes(result) == ["E002"]
    assert result.diagnostics[0].path == "/properties/b"


def test_unresolved_anchors_are_e003(write):
    write("types/b.json", {"$defs": {"present": {}}})
    p = write(
        "a.json",
        {
            "$id": "a",
            "properties": {
                "local": {"$ref": "#/$defs/absent"},
                "ext": {"$ref": "types/b.json#/$defs/absent"},
                "ok": {"$ref": "types/b.json#/$defs/present"},
            },
        },
    )
    result = lint_file(p)
    assert codes(result) == ["E003", "E003"]
    assert [d.path for d in result.diagnostics] == ["/properties/local", "/properties/ext"]


def test_unknown_visibility_is_e004(write):
    p = write(
        "a.json",
        {
            "$id": "a",
            "properties": {
                "x": {"ucp_request": "hidden"},
                "y": {"ucp_response": {"read": "maybe"}},
            },
        },
    )
    result = lint_file(p)
    assert codes(result) == ["E004", "E004"]
    assert result.diagnostics[0].path == "/properties/x/ucp_request"
    assert result.diagnostics[1].path == "/properties/y/ucp_response/read"


def test_wrong_annotation_type_is_e005(write):
    p = write(
        "a.json",
        {"$id": "a", "properties": {"x": {"ucp_request": 3}, "y": {"ucp_request": {"create": True}}}},
    )
    result = lint_file(p)
    assert codes(result) == ["E005", "E005"]
    assert "got number" in result.diagnostics[0].message
    assert "got boolean" in result.diagnostics[1].message


def test_missing_id_is_w002(write):
    result = lint_file(write("a.json", {"type": "object"}))
    assert result.status is FileStatus.WARNING
    assert codes(result) == ["W002"]
    assert result.diagnostics[0].severity is Severity.WARNING


def test_unknown_operation_is_w003(write):
    result = lint_file(write("a.json", {"$id": "a", "properties": {"x": {"ucp_request": {"delete": "omit"}}}}))
    assert codes(result) == ["W003"]
    assert result.status is FileStatus.WARNING


def test_lint_directory_counts(write, tmp_path):
    write("good.json", {"$id": "g"})
    write("nested/warn.json", {"type": "object"})
    write("nested/bad.json", {"$id": "b", "properties": {"x": {"ucp_request": "nope"}}})
    write("notes.txt", "ignored")

    result = lint(tmp_path)
    assert result.files_checked == 3
    assert result.errors == 1
    assert result.warnings == 1
    assert result.failed == 1
    assert result.passed == 2
    assert not result.ok
    assert [r.file.as_posix() for r in result.results] == ["good.json", "nested/bad.json", "nested/warn.json"]


def test_lint_strict_fails_on_warnings(write, tmp_path):
    write("good.json", {"$id": "g"})
    write("warn.json", {})
    assert lint(tmp_path).failed == 0
    strict = lint(tmp_path, strict=True)
    assert strict.failed == 1
    assert strict.passed == 1
    assert strict.ok


def test_lint_single_file(write):
    p = write("only.json", {"$id": "x"})
    result = lint(p)
    assert result.files_checked == 1
    assert result.results[0].file.as_posix() == "only.json"
