"""Tests for argument parsing, configuration and the importmap command."""

import json

import pytest

from args import parse_args
from cli_config import apply_config_overrides, load_config
from constants import Constants, ExitCodes
from importmap_cli import main


class TestArgParsing:
    """Sub-command arguments."""

    def test_require(self):
        ns = parse_args(["require", "lodash@^4", "bootstrap", "--loglevel", "DEBUG"])
        assert ns.action == "require"
        assert ns.PACKAGES == ["lodash@^4", "bootstrap"]
        assert ns.LOG_LEVEL == "DEBUG"
        assert ns.PATH is None
        assert ns.ENTRYPOINT is False

    def test_require_path_needs_single_package(self):
        with pytest.raises(SystemExit):
            parse_args(["require", "a", "b", "--path", "./a.js"])

    def test_update_defaults_to_all(self):
        ns = parse_args(["update"])
        assert ns.PACKAGES == []

    def test_show_requires_entrypoints(self):
        with pytest.raises(SystemExit):
            parse_args(["show"])


class TestConfig:
    """YAML config and CLI overrides."""

    def test_load_and_apply(self, tmp_path, restore_constants):
        config = tmp_path / "config.yml"
        config.write_text(
            "importmap:\n"
            "  asset_dirs: web/assets\n"
            "  public_prefix: /static/\n"
            "  request_timeout: '10'\n"
            "  bogus: 1\n"
        )

        apply_config_overrides(load_config(str(config)), parse_args(["update", "--public-dir", "out"]))

        assert Constants.ASSET_DIRS == ["web/assets"]
        assert Constants.PUBLIC_PREFIX == "/static/"
        assert Constants.REQUEST_TIMEOUT == 10
        assert Constants.PUBLIC_DIR == "out"
        assert not hasattr(Constants, "BOGUS")

    def test_missing_config_file(self, tmp_path):
        assert load_config(str(tmp_path / "nope.yml")) == {}

    def test_config_from_environment(self, tmp_path, monkeypatch):
        config = tmp_path / "config.yml"
        config.write_text("vendor_dir: lib/vendor\n")
        monkeypatch.setenv(Constants.ENV_CONFIG, str(config))

        assert load_config() == {"vendor_dir": "lib/vendor"}


@pytest.fixture
def project(tmp_path, monkeypatch, restore_constants):
    monkeypatch.delenv(Constants.ENV_CONFIG, raising=False)
    assets = tmp_path / "assets"
    assets.mkdir()
    (assets / "app.js").write_text("import './lib.js';\nimport('./later.js');\n")
    (assets / "lib.js").write_text("export const lib = true;\n")
    (assets / "later.js").write_text("")
    return tmp_path


class TestMain:
    """End-to-end runs over local files only."""

    def test_require_then_show(self, project, capsys):
        config = str(project / "importmap.yaml")

        with pytest.raises(SystemExit) as exc:
            main(["require", "app", "--path", "./assets/app.js", "--entrypoint", "--importmap", config])
        assert exc.value.code == ExitCodes.SUCCESS.value
        assert 'Package "app" added' in capsys.readouterr().out
        assert "path: ./assets/app.js" in (project / "importmap.yaml").read_text()

        with pytest.raises(SystemExit) as exc:
            main(["show", "app", "--importmap", config])
        assert exc.value.code == ExitCodes.SUCCESS.value
        data = json.loads(capsys.readouterr().out)
        assert list(data) == ["app", "/assets/lib.js", "/assets/later.js"]
        assert data["app"] == {"path": "/assets/app.js", "type": "js", "preload": True}
        assert data["/assets/lib.js"]["preload"] is True
        assert "preload" not in data["/assets/later.js"]

        with pytest.raises(SystemExit):
            main(["entrypoints", "--importmap", config])
        assert capsys.readouterr().out.split() == ["app"]

    def test_remove_unknown_package_fails(self, project):
        with pytest.raises(SystemExit) as exc:
            main(["remove", "ghost", "--importmap", str(project / "importmap.yaml")])

        assert exc.value.code == ExitCodes.FILE_ERROR.value
        assert not (project / "importmap.yaml").exists()
