import json

from stylecheck.config import RuleOverride
from stylecheck.diagnostics import Diagnostic, Severity
from stylecheck.pipeline import FileError, FileResult, RunResult
from stylecheck.registry import Registry
from stylecheck.report import (
    EXIT_ERROR,
    EXIT_OK,
    EXIT_VIOLATIONS,
    OutputFormat,
    exit_code,
    render,
    render_rules,
    render_text,
    to_json,
)
from stylecheck.text import Position


def diag(rule_id: str, line: int, column: int, severity: Severity, message: str, fix: str | None = None) -> Diagnostic:
    return Diagnostic(rule_id=rule_id, message=message, position=Position(line, column), severity=severity, fix=fix)


def sample_run() -> RunResult:
    return RunResult(
        files=(
            FileResult(
                path="src/a.cpp",
                diagnostics=[
                    diag("spacing-comma", 3, 7, Severity.WARNING, "Expected one space after `,`"),
                    diag(
                        "spacing-inside-scope",
                        4,
                        9,
                        Severity.WARNING,
                        "Expected one space inside `()`",
                        fix="call( x )",
                    ),
                ],
            ),
            FileResult(path="src/b.cpp", diagnostics=[], fixes_applied=2),
        ),
    )


def test_exit_codes() -> None:
    clean = RunResult(files=(FileResult(path="a.cpp", diagnostics=[]),))
    info_only = RunResult(
        files=(FileResult(path="a.cpp", diagnostics=[diag("naming-case", 1, 1, Severity.INFO, "m")]),)
    )
    broken = RunResult(errors=(FileError(path="x.cpp", kind="read", message="no such file or directory"),))

    assert exit_code(clean) == EXIT_OK
    assert exit_code(info_only) == EXIT_OK
    assert exit_code(info_only, fail_on=Severity.INFO) == EXIT_VIOLATIONS
    assert exit_code(sample_run()) == EXIT_VIOLATIONS
    assert exit_code(sample_run(), fail_on=Severity.ERROR) == EXIT_OK
    assert exit_code(broken) == EXIT_ERROR


def test_render_text() -> None:
    assert render_text(sample_run()) == "\n".join(
        [
            "src/a.cpp:3:7: warning [spacing-comma] Expected one space after `,`",
            "src/a.cpp:4:9: warning [spacing-inside-scope] Expected one space inside `()`",
            "    expected: call( x )",
            "src/b.cpp: applied 2 fixes",
            "2 files checked: 0 errors, 2 warnings, 0 info [fail]",
        ]
    )


def test_render_text_reports_errors_and_cancellation() -> None:
    result = RunResult(
        files=(FileResult(path="a.cpp", diagnostics=[]),),
        errors=(FileError(path="b.cpp", kind="read", message="not valid UTF-8 (byte 0xff at offset 0)"),),
        cancelled=True,
        skipped=("c.cpp", "d.cpp"),
    )

    assert render_text(result).splitlines() == [
        "b.cpp: read error: not valid UTF-8 (byte 0xff at offset 0)",
        "1 files checked: 0 errors, 0 warnings, 0 info, 1 files could not be checked (cancelled, 2 files skipped) [error]",
    ]


def test_json_document() -> None:
    document = to_json(sample_run())

    assert document["diagnostics"][0] == {
        "file": "src/a.cpp",
        "line": 3,
        "column": 7,
        "rule_id": "spacing-comma",
        "severity": "warning",
        "message": "Expected one space after `,`",
    }
    assert document["errors"] == []
    assert document["summary"] == {
        "counts": {"info": 0, "warning": 2, "error": 0},
        "files": 2,
        "status": "fail",
    }


def test_render_json_is_parseable() -> None:
    assert json.loads(render(sample_run(), OutputFormat.JSON)) == to_json(sample_run())


def test_render_rules_lists_effective_state() -> None:
    registry = Registry.build(
        overrides={
            "line-too-long": RuleOverride(enabled=False),
            "naming-case": RuleOverride(severity=Severity.ERROR),
        }
    )

    rows = {row.split()[0]: row.split()[1:4] for row in render_rules(registry).splitlines()}

    assert len(rows) == len(registry.settings)
    assert rows["line-too-long"] == ["line-width", "warning", "off"]
    assert rows["naming-case"] == ["naming", "error", "on"]
