import json

import pytest

from tree_mirror.config import Config


@pytest.fixture
def trees(tmp_path):
    src = tmp_path / "in"
    dst = tmp_path / "out"
    src.mkdir()
    return src, dst


@pytest.fixture
def make_config(tmp_path, trees):
    src, dst = trees

    def _make(**extra) -> Config:
        data = {
            "inputPath": str(src),
            "outputPath": str(dst),
            "stateFile": str(tmp_path / "time.txt"),
            "errorLog": str(tmp_path / "file_error.log"),
        }
        data.update(extra)
        path = tmp_path / "path.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return Config(path)

    return _make
