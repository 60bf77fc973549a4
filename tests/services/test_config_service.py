"""Unit tests for ConfigService and the relocatable data directory."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskflow.models.exceptions import ConfigError
from taskflow.services.config_service import (
    CONFIG_FILE_NAME,
    MAIN_DB_NAME,
    ConfigService,
    validate_folder_path,
)


def test_first_run_writes_default_config(tmp_config, tmp_path):
    assert tmp_config.config_path.exists()
    saved = json.loads(tmp_config.config_path.read_text(encoding="utf-8"))
    assert saved["data_dir"] == str(tmp_path / "data")
    assert saved["auto_backup"] is True
    assert tmp_config.get_main_db_path() == tmp_path / "data" / MAIN_DB_NAME


def test_malformed_config_falls_back_to_defaults(tmp_path):
    config_dir = tmp_path / "broken"
    config_dir.mkdir()
    (config_dir / CONFIG_FILE_NAME).write_text("{not json", encoding="utf-8")

    svc = ConfigService(config_dir=config_dir)
    assert svc.config.max_backup_files == 10


def test_set_value_dotted_key(tmp_config):
    tmp_config.set_value("cache.stale_time", 30)
    assert tmp_config.config.cache.stale_time == 30

    reloaded = ConfigService(config_dir=tmp_config.config_dir)
    assert reloaded.config.cache.stale_time == 30


@pytest.mark.parametrize("key", ["nope", "cache.nope", "data_dir"])
def test_set_value_rejects_unknown_and_reserved_keys(tmp_config, key):
    with pytest.raises(ConfigError):
        tmp_config.set_value(key, 1)


def test_set_value_rejects_invalid_value(tmp_config):
    with pytest.raises(ConfigError):
        tmp_config.set_value("max_backup_files", 0)


def test_reset_config(tmp_config):
    tmp_config.update_config(system_name="Other")
    assert tmp_config.reset_config().system_name == "TaskFlowMaster"


def test_set_data_dir_moves_database(tmp_config, tmp_path):
    old = tmp_config.data_dir
    old.mkdir(parents=True)
    (old / MAIN_DB_NAME).write_bytes(b"db")
    (old / "attachments" / "1").mkdir(parents=True)

    target = tmp_config.set_data_dir(tmp_path / "moved")

    assert target == (tmp_path / "moved").resolve()
    assert (target / MAIN_DB_NAME).read_bytes() == b"db"
    assert (target / "attachments" / "1").is_dir()
    assert (target / "backups").is_dir()
    assert not (old / MAIN_DB_NAME).exists()
    assert (target / CONFIG_FILE_NAME).exists()
    assert Path(ConfigService(config_dir=tmp_config.config_dir).config.data_dir) == target


def test_set_data_dir_without_moving(tmp_config, tmp_path):
    old = tmp_config.data_dir
    old.mkdir(parents=True)
    (old / MAIN_DB_NAME).write_bytes(b"db")

    target = tmp_config.set_data_dir(tmp_path / "fresh", move_files=False)
    assert (old / MAIN_DB_NAME).exists()
    assert not (target / MAIN_DB_NAME).exists()


def test_set_data_dir_refuses_to_overwrite(tmp_config, tmp_path):
    tmp_config.data_dir.mkdir(parents=True)
    (tmp_config.data_dir / MAIN_DB_NAME).write_bytes(b"old")
    occupied = tmp_path / "occupied"
    occupied.mkdir()
    (occupied / MAIN_DB_NAME).write_bytes(b"other")

    with pytest.raises(ConfigError, match="이미 데이터가 있습니다"):
        tmp_config.set_data_dir(occupied)
    assert (occupied / MAIN_DB_NAME).read_bytes() == b"other"


def test_set_data_dir_rejects_invalid_path(tmp_config):
    with pytest.raises(ConfigError, match="유효하지 않은 경로"):
        tmp_config.set_data_dir("bad|name")


def test_validate_folder_path(tmp_path):
    a_file = tmp_path / "file.txt"
    a_file.write_text("x")

    assert validate_folder_path(str(tmp_path)) is None
    assert validate_folder_path("  ") == "경로가 비어 있습니다."
    assert "사용할 수 없는 문자" in validate_folder_path("data<1>")
    assert "너무 깁니다" in validate_folder_path("a" * 300)
    assert validate_folder_path(str(a_file)) == "폴더가 아닌 파일 경로입니다."


def test_credentials_round_trip(tmp_config):
    assert tmp_config.load_credentials() is None
    tmp_config.save_credentials("secret")
    assert tmp_config.load_credentials() == {"token": "secret"}

    tmp_config.credentials_path.write_text("{", encoding="utf-8")
    assert tmp_config.load_credentials() is None
