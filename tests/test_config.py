"""Tests for TOML config file loading."""

from __future__ import annotations

from pathlib import Path

from sqlcmdpp.cli import build_parser, config_variables, load_config, main, resolve_options


def _options(tmp_path: Path, *argv: str):
    script = tmp_path / "deploy.sql"
    script.write_text("")
    return resolve_options(build_parser().parse_args([str(script), *argv]))


class TestLoadConfig:
    def test_missing_config_returns_empty(self, tmp_path: Path) -> None:
        assert load_config(None, tmp_path) == {}

    def test_explicit_path(self, tmp_path: Path) -> None:
        cfg = tmp_path / "custom.toml"
        cfg.write_text('[variables]\nDbName = "test"\n')
        result = load_config(cfg, tmp_path)
        assert result["variables"] == {"DbName": "test"}

    def test_auto_discover_sqlcmdpp_toml(self, tmp_path: Path) -> None:
        cfg = tmp_path / "sqlcmdpp.toml"
        cfg.write_text('[variables]\nowner = "dbo"\n')
        result = load_config(None, tmp_path)
        assert result["variables"] == {"owner": "dbo"}

    def test_config_variables_stringified(self) -> None:
        assert config_variables({"variables": {"n": 5, "flag": True}}) == {
            "n": "5",
            "flag": "True",
        }

    def test_config_variables_ignores_non_table(self) -> None:
        assert config_variables({"variables": "nope"}) == {}


class TestConfigMerge:
    def test_defaults(self, tmp_path: Path) -> None:
        opts = _options(tmp_path)
        assert opts.variables == {}
        assert opts.setvar_replacement is False
        assert opts.encoding == "utf-8"
        assert opts.max_include_depth == 16
        assert opts.separator == "GO"

    def test_config_variables_merged(self, tmp_path: Path) -> None:
        (tmp_path / "sqlcmdpp.toml").write_text('[variables]\ndb = "prod"\n')
        assert _options(tmp_path).variables == {"db": "prod"}

    def test_cli_overrides_config_variables(self, tmp_path: Path) -> None:
        (tmp_path / "sqlcmdpp.toml").write_text('[variables]\ndb = "prod"\nowner = "dbo"\n')
        opts = _options(tmp_path, "-v", "db=dev")
        assert opts.variables == {"db": "dev", "owner": "dbo"}

    def test_config_preprocessor_table(self, tmp_path: Path) -> None:
        (tmp_path / "sqlcmdpp.toml").write_text(
            "[preprocessor]\n"
            "setvar_replacement = true\n"
            'encoding = "latin-1"\n'
            "max_include_depth = 4\n"
        )
        opts = _options(tmp_path)
        assert opts.setvar_replacement is True
        assert opts.encoding == "latin-1"
        assert opts.max_include_depth == 4

    def test_cli_overrides_preprocessor_table(self, tmp_path: Path) -> None:
        (tmp_path / "sqlcmdpp.toml").write_text(
            "[preprocessor]\nsetvar_replacement = true\nmax_include_depth = 4\n"
        )
        opts = _options(tmp_path, "--no-setvar-replacement", "--max-include-depth", "8")
        assert opts.setvar_replacement is False
        assert opts.max_include_depth == 8

    def test_wrong_types_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "sqlcmdpp.toml").write_text(
            '[preprocessor]\nsetvar_replacement = "yes"\nmax_include_depth = true\n'
        )
        opts = _options(tmp_path)
        assert opts.setvar_replacement is False
        assert opts.max_include_depth == 16

    def test_output_separator(self, tmp_path: Path) -> None:
        (tmp_path / "sqlcmdpp.toml").write_text('[output]\nseparator = "go"\n')
        assert _options(tmp_path).separator == "go"
        assert _options(tmp_path, "--separator", "GO").separator == "GO"

    def test_explicit_config_flag(self, tmp_path: Path) -> None:
        cfg = tmp_path / "alt.toml"
        cfg.write_text('[variables]\nkey = "val"\n')
        assert _options(tmp_path, "--config", str(cfg)).variables == {"key": "val"}

    def test_invalid_toml_returns_2(self, tmp_path: Path) -> None:
        (tmp_path / "sqlcmdpp.toml").write_text("[variables\n")
        script = tmp_path / "deploy.sql"
        script.write_text("SELECT 1;\n")
        assert main([str(script)]) == 2
