import json
from pathlib import Path

import pytest

from stylecheck.cli import build_parser, main
from stylecheck.report import EXIT_ERROR, EXIT_OK, EXIT_VIOLATIONS


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "clean.cpp").write_text("int answer = 42;\n", encoding="utf-8")
    (tmp_path / "dirty.cpp").write_text("int badName = 0;\n", encoding="utf-8")
    return tmp_path


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["src"])

    assert args.paths == [Path("src")]
    assert args.format == "text"
    assert args.fail_on is None
    assert args.enable == [] and args.disable == [] and args.severity == []
    assert args.jobs >= 1


def test_clean_file_passes(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["clean.cpp", "--no-progress"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == "1 files checked: 0 errors, 0 warnings, 0 info [pass]"


def test_violations_fail_the_run(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["dirty.cpp"]) == EXIT_VIOLATIONS

    out = capsys.readouterr().out
    assert out.startswith("dirty.cpp:1:5: warning [naming-case] ")
    assert out.rstrip().endswith("[fail]")


def test_disable_and_fail_on(workspace: Path) -> None:
    assert main(["dirty.cpp", "--disable", "naming-case"]) == EXIT_OK
    assert main(["dirty.cpp", "--fail-on", "error"]) == EXIT_OK
    assert main(["dirty.cpp", "--severity", "naming-case=error", "--fail-on", "error"]) == EXIT_VIOLATIONS


def test_json_output(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([".", "--format", "json", "--jobs", "2"]) == EXIT_VIOLATIONS

    document = json.loads(capsys.readouterr().out)
    assert [(Path(item["file"]).name, item["rule_id"]) for item in document["diagnostics"]] == [
        ("dirty.cpp", "naming-case")
    ]
    assert document["summary"]["files"] == 2
    assert document["summary"]["status"] == "fail"


def test_config_file_is_discovered(workspace: Path) -> None:
    (workspace / "stylecheck.toml").write_text('[rules]\nnaming-case = false\n', encoding="utf-8")

    assert main(["dirty.cpp"]) == EXIT_OK
    assert main(["dirty.cpp", "--enable", "naming-case"]) == EXIT_VIOLATIONS


def test_config_fail_on_is_used_unless_overridden(workspace: Path) -> None:
    (workspace / "stylecheck.toml").write_text('fail_on = "error"\n', encoding="utf-8")

    assert main(["dirty.cpp"]) == EXIT_OK
    assert main(["dirty.cpp", "--fail-on", "warning"]) == EXIT_VIOLATIONS


@pytest.mark.parametrize(
    "argv, message",
    [
        (["dirty.cpp", "--enable", "no-such-rule"], "Unknown rule id `no-such-rule`"),
        (["dirty.cpp", "--severity", "naming-case"], "--severity expects ID=LEVEL"),
        (["dirty.cpp", "--severity", "naming-case=fatal"], "invalid level 'fatal'"),
        (["dirty.cpp", "--config", "missing.toml"], "cannot read config"),
    ],
)
def test_configuration_errors_exit_with_two(
    workspace: Path,
    capsys: pytest.CaptureFixture[str],
    argv: list[str],
    message: str,
) -> None:
    assert main(argv) == EXIT_ERROR

    err = capsys.readouterr().err
    assert err.startswith("stylecheck: configuration error: ")
    assert message in err


def test_missing_path_exits_with_two(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["gone.cpp", "clean.cpp"]) == EXIT_ERROR

    out = capsys.readouterr().out
    assert "gone.cpp: read error: no such file or directory" in out
    assert "1 files could not be checked" in out


def test_fix_rewrites_in_place(workspace: Path) -> None:
    target = workspace / "spacing.cpp"
    target.write_text("int total = add(1,2);\n", encoding="utf-8")

    assert main(["spacing.cpp", "--fix"]) == EXIT_OK
    assert target.read_text(encoding="utf-8") == "int total = add( 1, 2 );\n"


def test_list_rules_needs_no_paths(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--list-rules", "--disable", "line-too-long"]) == EXIT_OK

    rows = capsys.readouterr().out.splitlines()
    assert any(row.startswith("line-too-long") and "  off  " in row for row in rows)


def test_no_paths_is_a_usage_error(workspace: Path) -> None:
    with pytest.raises(SystemExit) as info:
        main([])

    assert info.value.code == 2


def test_jobs_must_be_positive(workspace: Path) -> None:
    with pytest.raises(SystemExit) as info:
        main(["clean.cpp", "--jobs", "0"])

    assert info.value.code == 2
