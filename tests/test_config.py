import json

import pytest

from tree_mirror.config import POLICY_INCREMENTAL, POLICY_NEWER, Config
from tree_mirror.errors import ConfigError


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_defaults_fill_optional_keys(tmp_path):
    path = write_json(tmp_path / "path.json", {"inputPath": "in", "outputPath": "out"})

    cfg = Config(path)

    assert str(cfg.input_path) == "in"
    assert str(cfg.output_path) == "out"
    assert cfg.state_file.name == "time.txt"
    assert cfg.error_log.name == "file_error.log"
    assert cfg.interval == 300
    assert cfg.sync_policy == POLICY_INCREMENTAL
    assert cfg.watch_input is False
    assert cfg.log_file == ""


def test_optional_keys_are_read(tmp_path):
    path = write_json(tmp_path / "path.json", {
        "inputPath": "in",
        "outputPath": "out",
        "intervalSeconds": 0,
        "syncPolicy": POLICY_NEWER,
        "watchInput": True,
        "settleSeconds": 2.5,
        "logLevel": "debug",
    })

    cfg = Config(path)

    assert cfg.interval == 1
    assert cfg.sync_policy == POLICY_NEWER
    assert cfg.watch_input is True
    assert cfg.settle_time == 2.5
    assert cfg.log_level == "debug"


def test_missing_file_is_fatal(tmp_path):
    with pytest.raises(ConfigError, match="Failed reading"):
        Config(tmp_path / "path.json")


def test_malformed_json_is_fatal(tmp_path):
    path = tmp_path / "path.json"
    path.write_text("{inputPath: ", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed parsing"):
        Config(path)


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"inputPath": "in"},
        {"inputPath": "in", "outputPath": ""},
        {"inputPath": 3, "outputPath": "out"},
        {"inputPath": "in", "outputPath": "out", "syncPolicy": "mirror"},
        {"inputPath": "in", "outputPath": "out", "intervalSeconds": "often"},
    ],
)
def test_invalid_content_is_fatal(tmp_path, data):
    path = write_json(tmp_path / "path.json", data)
    with pytest.raises(ConfigError):
        Config(path)
