from pathlib import Path
import threading

import pytest

from stylecheck.config import CheckerConfig, RuleOptions
from stylecheck.errors import SourceReadError
from stylecheck.pipeline import check_paths, check_text
from stylecheck.report import EXIT_ERROR, EXIT_OK, EXIT_VIOLATIONS, exit_code
from stylecheck.source import FileRole, Language, discover_sources, load_source


CLEAN = "int answer = 42;\n"


def write(path: Path, text: str | bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(text, bytes):
        path.write_bytes(text)
    else:
        path.write_text(text, encoding="utf-8", newline="")
    return path


def test_check_text_classifies_by_path() -> None:
    result = check_text("set( SourceDir src )\n", path="cmake/paths.cmake")

    assert [d.rule_id for d in result.diagnostics] == ["naming-case"]
    assert result.path == "cmake/paths.cmake"


def test_check_text_language_override() -> None:
    result = check_text("set( SourceDir src )\n", path="notes.txt", language=Language.CMAKE)

    assert [d.rule_id for d in result.diagnostics] == ["naming-case"]


def test_discovery_filters_sorts_and_skips_build_directories(tmp_path: Path) -> None:
    write(tmp_path / "src" / "b.cpp", CLEAN)
    write(tmp_path / "src" / "a.hpp", "#pragma once\n")
    write(tmp_path / "CMakeLists.txt", "project( demo )\n")
    write(tmp_path / "README.md", "docs\n")
    write(tmp_path / "build" / "generated.cpp", CLEAN)
    explicit = write(tmp_path / "notes.txt", "int value = 0;\n")

    discovery = discover_sources([tmp_path, explicit, tmp_path / "missing.cpp"], RuleOptions())

    assert [path.relative_to(tmp_path).as_posix() for path in discovery.paths] == [
        "CMakeLists.txt",
        "notes.txt",
        "src/a.hpp",
        "src/b.cpp",
    ]
    assert discovery.missing == (tmp_path / "missing.cpp",)


def test_load_source_strips_bom_and_classifies(tmp_path: Path) -> None:
    path = write(tmp_path / "widget.h", "\ufeff#pragma once\n".encode())

    source = load_source(path, RuleOptions())

    assert source.text == "#pragma once\n"
    assert (source.language, source.role) == (Language.CPP, FileRole.HEADER)


def test_load_source_reports_invalid_utf8(tmp_path: Path) -> None:
    path = write(tmp_path / "bad.cpp", b"int x = \xff;\n")

    with pytest.raises(SourceReadError) as info:
        load_source(path, RuleOptions())

    assert info.value.reason.startswith("not valid UTF-8")


def test_check_paths_collects_results_sorted_by_path(tmp_path: Path) -> None:
    write(tmp_path / "z.cpp", CLEAN)
    write(tmp_path / "a.cpp", "int badName = 0;\n")

    result = check_paths([tmp_path], jobs=2)

    assert [Path(file.path).name for file in result.files] == ["a.cpp", "z.cpp"]
    assert [(Path(path).name, d.rule_id) for path, d in result.diagnostics] == [("a.cpp", "naming-case")]
    assert exit_code(result) == EXIT_VIOLATIONS


def test_clean_tree_passes(tmp_path: Path) -> None:
    write(tmp_path / "a.cpp", CLEAN)

    result = check_paths([tmp_path])

    assert result.file_count == 1
    assert exit_code(result) == EXIT_OK


def test_unreadable_files_are_reported_and_the_run_continues(tmp_path: Path) -> None:
    write(tmp_path / "bad.cpp", b"\xff\xfe\x00")
    write(tmp_path / "good.cpp", CLEAN)

    result = check_paths([tmp_path, tmp_path / "gone.cpp"])

    assert [(Path(error.path).name, error.kind) for error in result.errors] == [("bad.cpp", "read"), ("gone.cpp", "read")]
    assert result.errors[1].message == "no such file or directory"
    assert [Path(file.path).name for file in result.files] == ["good.cpp"]
    assert result.has_file_errors
    assert exit_code(result) == EXIT_ERROR


def test_fail_fast_stops_before_scanning(tmp_path: Path) -> None:
    write(tmp_path / "good.cpp", CLEAN)

    result = check_paths([tmp_path, tmp_path / "gone.cpp"], fail_fast=True)

    assert result.cancelled
    assert result.files == ()
    assert [Path(path).name for path in result.skipped] == ["good.cpp"]
    assert exit_code(result) == EXIT_ERROR


def test_cancelled_run_skips_every_file(tmp_path: Path) -> None:
    write(tmp_path / "a.cpp", CLEAN)
    write(tmp_path / "b.cpp", CLEAN)
    cancel = threading.Event()
    cancel.set()

    result = check_paths([tmp_path], cancel=cancel)

    assert result.cancelled
    assert result.files == ()
    assert len(result.skipped) == 2


def test_internal_error_becomes_a_file_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    write(tmp_path / "a.cpp", CLEAN)

    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr("stylecheck.pipeline.entrypoints.run_lint", explode)
    result = check_paths([tmp_path])

    assert [(error.kind, error.message) for error in result.errors] == [("internal", "RuntimeError: boom")]
    assert result.files == ()


def test_fix_rewrites_the_file(tmp_path: Path) -> None:
    path = write(tmp_path / "a.cpp", "void run() {\n    call(x);   \n}\n")

    result = check_paths([path], fix=True)

    assert path.read_text(encoding="utf-8") == "void run() {\n    call( x );\n}\n"
    assert result.files[0].fixes_applied == 2
    assert result.files[0].diagnostics == []


def test_config_options_reach_the_evaluators(tmp_path: Path) -> None:
    write(tmp_path / "a.cpp", "int one_two_three = 0;\n")

    result = check_paths([tmp_path], config=CheckerConfig(options=RuleOptions(max_name_words=2)))

    assert [d.rule_id for _, d in result.diagnostics] == ["naming-word-count"]


def test_jobs_must_be_positive() -> None:
    with pytest.raises(ValueError):
        check_paths([], jobs=0)
