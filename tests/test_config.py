from pathlib import Path
import textwrap

import pytest

from stylecheck.config import (
    DEFAULT_NOISE_WORDS,
    CheckerConfig,
    RuleOptions,
    RuleOverride,
    find_config,
    load_config,
    parse_config,
)
from stylecheck.diagnostics import Severity
from stylecheck.errors import ConfigurationError


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
    return path


def test_missing_path_yields_defaults() -> None:
    config = load_config(None)

    assert config == CheckerConfig()
    assert config.options.line_width == 80
    assert config.options.noise_words == DEFAULT_NOISE_WORDS
    assert config.fail_on == Severity.WARNING


def test_load_full_config_file(tmp_path: Path) -> None:
    path = write(
        tmp_path / "stylecheck.toml",
        """
        fail_on = "error"

        [rules]
        line-too-long = false
        naming-noise-word = { severity = "info" }
        spacing-comma = { enabled = true, severity = "error" }

        [options]
        line_width = 100
        indent_namespace_bodies = false
        noise_words = ["get", "set"]
        file_time_budget = 2
        """,
    )

    config = load_config(path)

    assert config.fail_on == Severity.ERROR
    assert config.source == str(path)
    assert config.overrides["line-too-long"] == RuleOverride(enabled=False)
    assert config.overrides["naming-noise-word"] == RuleOverride(severity=Severity.INFO)
    assert config.overrides["spacing-comma"] == RuleOverride(enabled=True, severity=Severity.ERROR)
    assert config.options.line_width == 100
    assert config.options.indent_namespace_bodies is False
    assert config.options.noise_words == ("get", "set")
    assert config.options.file_time_budget == 2.0
    assert config.options.indent_width == RuleOptions().indent_width


def test_pyproject_table_is_read(tmp_path: Path) -> None:
    path = write(
        tmp_path / "pyproject.toml",
        """
        [project]
        name = "demo"

        [tool.stylecheck.options]
        line_width = 120
        """,
    )

    assert load_config(path).options.line_width == 120


def test_find_config_walks_up_from_start(tmp_path: Path) -> None:
    config_path = write(tmp_path / ".stylecheck.toml", "[options]\n")
    nested = tmp_path / "src" / "deep"
    nested.mkdir(parents=True)

    assert find_config(nested) == config_path


def test_find_config_prefers_dedicated_file_over_pyproject(tmp_path: Path) -> None:
    write(tmp_path / "pyproject.toml", "[tool.stylecheck]\nfail_on = 'error'\n")
    dedicated = write(tmp_path / "stylecheck.toml", "fail_on = 'info'\n")

    assert find_config(tmp_path) == dedicated


def test_find_config_skips_pyproject_without_section(tmp_path: Path) -> None:
    write(tmp_path / "pyproject.toml", "[project]\nname = 'demo'\n")
    nested = tmp_path / "pkg"
    nested.mkdir()

    found = find_config(nested)

    assert found != tmp_path / "pyproject.toml"


@pytest.mark.parametrize(
    "data, message",
    [
        ({"colour": "blue"}, "unknown top-level keys: colour"),
        ({"fail_on": "fatal"}, "fail_on: invalid severity 'fatal'"),
        ({"rules": []}, "`rules` must be a table"),
        ({"rules": {"naming-case": "off"}}, "rule `naming-case` must be a table or a boolean"),
        ({"rules": {"naming-case": {"level": "info"}}}, "unknown keys: level"),
        ({"rules": {"naming-case": {"enabled": "yes"}}}, "`enabled` must be a boolean"),
        ({"rules": {"naming-case": {"severity": "loud"}}}, "naming-case: invalid severity"),
        ({"options": {"line_width": "wide"}}, "option `line_width` must be an integer"),
        ({"options": {"line_width": True}}, "option `line_width` must be an integer"),
        ({"options": {"indent_namespace_bodies": 1}}, "must be a boolean"),
        ({"options": {"noise_words": "get"}}, "must be a list of strings"),
        ({"options": {"tab_width": 8}}, "unknown option `tab_width`"),
    ],
)
def test_parse_config_rejects_invalid_data(data: dict[str, object], message: str) -> None:
    with pytest.raises(ConfigurationError, match=message):
        parse_config(data, source="stylecheck.toml")


def test_error_message_names_the_source() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        parse_config({"colour": "blue"}, source="conf/stylecheck.toml")

    assert str(excinfo.value).startswith("conf/stylecheck.toml: ")
    assert excinfo.value.source == "conf/stylecheck.toml"


def test_malformed_toml_is_a_configuration_error(tmp_path: Path) -> None:
    path = write(tmp_path / "stylecheck.toml", "[rules\n")

    with pytest.raises(ConfigurationError, match="malformed TOML"):
        load_config(path)


def test_unreadable_config_is_a_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="cannot read config"):
        load_config(tmp_path / "missing.toml")


def test_configuration_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        parse_config({"fail_on": 3})
