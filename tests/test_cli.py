"""Tests for the command line interface."""

import json

from click.testing import CliRunner

from modkeeper.cli import main

from fakes import make_manifest


def _config(tmp_path, with_plugins=True):
    plugins = tmp_path / "BepInEx" / "plugins"
    if with_plugins:
        plugins.mkdir(parents=True)
    path = tmp_path / "modkeeper.json"
    path.write_text(json.dumps({"game_directory": str(tmp_path)}))
    return path, plugins


def test_list_installed_mods(tmp_path):
    config, plugins = _config(tmp_path)
    (plugins / "SpinCore").mkdir()
    (plugins / "SpinCore" / "manifest.json").write_text(
        json.dumps(make_manifest("SpinCore", "1.2"))
    )

    result = CliRunner().invoke(main, ["-c", str(config), "list"])

    assert result.exit_code == 0, result.output
    assert "SpinCore 1.2" in result.output


def test_list_without_plugins_directory(tmp_path):
    config, _ = _config(tmp_path, with_plugins=False)

    result = CliRunner().invoke(main, ["-c", str(config), "list"])

    assert result.exit_code == 0
    assert "没有找到模组" in result.output


def test_info_unknown_mod_fails(tmp_path):
    config, _ = _config(tmp_path)

    result = CliRunner().invoke(main, ["-c", str(config), "info", "Nothing"])

    assert result.exit_code == 1
    assert "E304" in result.output


def test_update_requires_name_or_all(tmp_path):
    config, _ = _config(tmp_path)

    result = CliRunner().invoke(main, ["-c", str(config), "update"])

    assert result.exit_code == 2


def test_invalid_config(tmp_path):
    path = tmp_path / "modkeeper.json"
    path.write_text(json.dumps({"max_concurrent": -1}))

    result = CliRunner().invoke(main, ["-c", str(path), "list"])

    assert result.exit_code == 1
    assert "配置错误" in result.output
