import json

import pytest
from click.testing import CliRunner
from rich.console import Console

from conftest import FakeSession, make_api, touch

from modpack_sync import cli
from modpack_sync.config import ConfigError, SyncConfig
from modpack_sync.synclog import SyncLog


@pytest.fixture
def modpack(tmp_path):
    base_dir = tmp_path / "pack"
    base_dir.mkdir()
    (base_dir / "modlist.json").write_text(
        json.dumps(
            [
                {
                    "filename": "foo-1.2.0.jar",
                    "name": "Foo",
                    "version": "1.2.0",
                    "url": "https://host/mods/12345",
                },
                {"filename": "nourl-1.0.jar", "name": "No Url", "version": "1.0"},
            ]
        ),
        encoding="utf-8",
    )
    return base_dir


def test_config_defaults(modpack):
    config = SyncConfig.build(modpack, " key ")

    assert config.api_key == "key"
    assert config.mods_file == modpack / "modlist.json"
    assert config.mods_dir == modpack / ".minecraft" / "mods"


@pytest.mark.parametrize("api_key", [None, "", "   "])
def test_config_requires_api_key(modpack, api_key):
    with pytest.raises(ConfigError, match="CURSE_API_KEY"):
        SyncConfig.build(modpack, api_key)


def test_config_requires_base_dir(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        SyncConfig.build(tmp_path / "missing", "key")


def test_sync_log_writes_tagged_lines(tmp_path):
    log_file = tmp_path / "sync.log"
    log_file.write_text("previous run\n")

    log = SyncLog(log_file)
    log.info("Starting")
    log.warn("no url")
    log("error", "boom")

    lines = log_file.read_text().splitlines()
    assert len(lines) == 3
    assert lines[0].endswith("] [INFO] Starting")
    assert lines[1].endswith("] [WARN] no url")
    assert lines[2].endswith("] [ERR!] boom")
    assert lines[0].startswith("[20")


def test_sync_without_api_key_exits(modpack, monkeypatch):
    monkeypatch.delenv("CURSE_API_KEY", raising=False)

    result = CliRunner().invoke(cli.main, ["sync", str(modpack)])

    assert result.exit_code == 1
    assert "No API key" in result.output


def test_sync_with_malformed_manifest_exits(modpack):
    (modpack / "modlist.json").write_text("{}", encoding="utf-8")

    result = CliRunner().invoke(cli.main, ["--api-key", "key", "sync", str(modpack)])

    assert result.exit_code == 1
    assert "Manifest must be a JSON list" in result.output


def test_sync_runs_against_api(modpack, tmp_path, monkeypatch):
    session = FakeSession(catalogs={"12345": [(999, "foo-1.2.0.jar")]}, downloads={999: b"foo"})
    monkeypatch.setattr(cli, "CurseForgeAPI", lambda api_key: make_api(session))
    mods_dir = modpack / ".minecraft" / "mods"
    touch(mods_dir, "foo-1.1.0.jar")
    log_file = tmp_path / "sync.log"

    result = CliRunner().invoke(
        cli.main, ["--api-key", "key", "sync", str(modpack), "--log-file", str(log_file)]
    )

    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in mods_dir.iterdir()) == ["foo-1.2.0.jar"]
    log_text = log_file.read_text()
    assert "Starting new run of modpack-sync..." in log_text
    assert "Successfully downloaded foo-1.2.0.jar" in log_text
    assert "[WARN] Skipping file: nourl-1.0.jar missing url!" in log_text


def test_sync_reads_key_from_environment(modpack, tmp_path, monkeypatch):
    seen = []
    monkeypatch.setenv("CURSE_API_KEY", "env-key")
    monkeypatch.setattr(
        cli, "CurseForgeAPI", lambda api_key: seen.append(api_key) or make_api(FakeSession())
    )

    result = CliRunner().invoke(
        cli.main, ["sync", str(modpack), "--log-file", str(tmp_path / "sync.log")]
    )

    assert result.exit_code == 0, result.output
    assert seen == ["env-key"]
    assert "Failed:" in result.output


def test_plan_prints_actions_without_network(modpack, monkeypatch):
    monkeypatch.delenv("CURSE_API_KEY", raising=False)
    monkeypatch.setattr(cli, "console", Console(width=200))
    touch(modpack / ".minecraft" / "mods", "foo-1.1.0.jar", "gone-2.0.jar")

    result = CliRunner().invoke(cli.main, ["plan", str(modpack)])

    assert result.exit_code == 0, result.output
    assert "Update" in result.output
    assert "foo-1.1.0.jar" in result.output
    assert "Missing url" in result.output
    assert "gone-2.0.jar" in result.output


def test_plan_missing_base_dir(tmp_path):
    result = CliRunner().invoke(cli.main, ["plan", str(tmp_path / "nope")])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_sync_with_unwritable_log_file_exits(modpack, tmp_path):
    log_dir = tmp_path / "logs"
    log_dir.mkdir()

    result = CliRunner().invoke(
        cli.main, ["--api-key", "key", "sync", str(modpack), "--log-file", str(log_dir)]
    )

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)
