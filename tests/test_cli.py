"""
Tests for the command-line interface.
"""

import json

import pytest
import yaml

from nativize import __version__
from nativize.cli_entry import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, create_parser, main
from nativize.config import ConfigurationManager

SOURCE = "$(el).show();\nMath.pow(a, 2);\n"


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    """Run in an empty directory, without user or environment configuration."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(ConfigurationManager, "DEFAULT_CONFIG_PATHS", ["nativize.json"])
    monkeypatch.setattr(ConfigurationManager, "load_env_config", staticmethod(lambda: {}))
    return tmp_path


@pytest.fixture
def script(workdir):
    path = workdir / "app.js"
    path.write_text(SOURCE)
    return path


class TestParser:
    def test_path_commands_require_paths(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["upgrade"])

    def test_rule_options(self):
        args = create_parser().parse_args(
            ["check", "src", "--only", "legacy", "--disable", "substr-to-slice", "-j", "3"]
        )
        assert args.only == ["legacy"]
        assert args.disable == ["substr-to-slice"]
        assert args.jobs == 3

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            main(["--version"])
        assert __version__ in capsys.readouterr().out

    def test_no_command(self, capsys):
        assert main([]) == EXIT_USAGE
        assert "usage:" in capsys.readouterr().out


class TestTransformCommands:
    def test_upgrade_rewrites(self, script):
        assert main(["--no-rich", "upgrade", str(script)]) == EXIT_OK
        assert script.read_text() == 'el.style.display = "";\na ** 2;\n'

    def test_check_reports_change(self, script, capsys):
        assert main(["--no-rich", "check", str(script)]) == EXIT_FAILURE
        assert script.read_text() == SOURCE
        assert "would change" in capsys.readouterr().out

    def test_check_clean_file(self, workdir):
        path = workdir / "clean.js"
        path.write_text("foo();\n")
        assert main(["--no-rich", "check", str(path)]) == EXIT_OK

    def test_diff(self, script, capsys):
        assert main(["--no-rich", "diff", str(script)]) == EXIT_OK
        out = capsys.readouterr().out
        assert "-Math.pow(a, 2);" in out
        assert "+a ** 2;" in out
        assert script.read_text() == SOURCE

    def test_only_group(self, script):
        assert main(["--no-rich", "upgrade", "--only", "legacy", str(script)]) == EXIT_OK
        assert script.read_text() == "$(el).show();\na ** 2;\n"

    def test_no_jquery(self, script):
        assert main(["--no-rich", "upgrade", "--no-jquery", str(script)]) == EXIT_OK
        assert script.read_text().startswith("$(el).show();")

    def test_disable_rule(self, script):
        args = ["--no-rich", "upgrade", "--disable", "math-pow-to-exponentiation", str(script)]
        assert main(args) == EXIT_OK
        assert script.read_text() == 'el.style.display = "";\nMath.pow(a, 2);\n'

    def test_unknown_group(self, script):
        assert main(["--no-rich", "check", "--only", "react", str(script)]) == EXIT_USAGE

    def test_unknown_rule(self, script):
        assert main(["--no-rich", "check", "--disable", "no-such-rule", str(script)]) == EXIT_USAGE

    def test_missing_path(self, workdir):
        assert main(["--no-rich", "check", str(workdir / "missing.js")]) == EXIT_USAGE

    def test_failed_file(self, workdir):
        path = workdir / "bad.js"
        path.write_text("var = ;\n")
        assert main(["--no-rich", "upgrade", str(path)]) == EXIT_FAILURE

    def test_machine_readable(self, script, capsys):
        assert main(["--machine-readable", "check", str(script)]) == EXIT_FAILURE
        report = json.loads(capsys.readouterr().out)
        assert report["mode"] == "check"
        assert report["files_changed"] == 1
        assert report["rules"] == {
            "math-pow-to-exponentiation": 1,
            "show-hide-to-style-display": 1,
        }

    def test_machine_readable_error(self, workdir, capsys):
        assert main(["--machine-readable", "check", str(workdir / "missing.js")]) == EXIT_USAGE
        payload = json.loads(capsys.readouterr().out)
        assert payload["success"] is False
        assert payload["command"] == "check"

    def test_config_file(self, script, workdir):
        (workdir / "custom.yaml").write_text("rules:\n  enabled_groups: [legacy]\n")
        assert main(["--no-rich", "-c", "custom.yaml", "upgrade", str(script)]) == EXIT_OK
        assert script.read_text() == "$(el).show();\na ** 2;\n"

    def test_invalid_config_file(self, script, workdir):
        (workdir / "custom.json").write_text('{"rules": {"max_passes": 0}}')
        assert main(["--no-rich", "-c", "custom.json", "check", str(script)]) == EXIT_USAGE


class TestInfoCommands:
    def test_rules(self, capsys):
        assert main(["--no-rich", "rules", "--no-jquery"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "each-to-for-each | jquery | no" in out
        assert "substr-to-slice | legacy | yes" in out

    def test_rules_machine_readable(self, capsys):
        assert main(["--machine-readable", "rules"]) == EXIT_OK
        rules = json.loads(capsys.readouterr().out)
        assert all(r["enabled"] for r in rules)
        assert {r["group"] for r in rules} == {"jquery", "legacy"}

    def test_config_show(self, capsys):
        assert main(["--no-rich", "config", "--show"]) == EXIT_OK
        assert "Nativize Configuration Summary" in capsys.readouterr().out

    def test_config_machine_readable(self, capsys):
        assert main(["--machine-readable", "config"]) == EXIT_OK
        assert json.loads(capsys.readouterr().out)["rules"]["max_passes"] == 20

    def test_config_init(self, workdir):
        assert main(["--no-rich", "config", "--init", "nativize.yaml", "--format", "yaml"]) == EXIT_OK
        data = yaml.safe_load((workdir / "nativize.yaml").read_text())
        assert data["analysis"]["factory_names"] == ["$", "jQuery"]
