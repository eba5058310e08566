import json
import logging

import pytest

from daqtyl.dactyl import LogLevelAction, main, make_parser
from daqtyl.model import DEFAULT_TARGETS


def test_default_targets():
    args = make_parser().parse_args([])
    assert args.targets == []
    assert args.log_level == "INFO"
    assert DEFAULT_TARGETS == ('right', 'left', 'right-plate', 'left-plate')


def test_log_level_choices():
    assert make_parser().parse_args(["--log-level", "DEBUG"]).log_level == "DEBUG"
    assert set(LogLevelAction.log_levels) == {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
    with pytest.raises(SystemExit):
        make_parser().parse_args(["--log-level", "LOUD"])


def test_builds_named_targets(tmp_path):
    assert main(["--output-dir", str(tmp_path), "encoder-test"]) == 0
    assert (tmp_path / "daqtyl_encoder-test.scad").exists()


def test_unknown_target_is_usage_error(tmp_path):
    with pytest.raises(SystemExit) as exit_info:
        main(["--output-dir", str(tmp_path), "middle"])
    assert exit_info.value.code == 2


def test_bad_config_fails(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({'nrows': 0}), encoding="utf-8")
    assert main(["--config", str(path), "--output-dir", str(tmp_path), "encoder-test"]) == 1
    assert "nrows" in caplog.text


def test_failed_target_reported(tmp_path, caplog):
    caplog.set_level(logging.ERROR)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({'column_style': 'fixed', 'fixed_angles': [0.1]}), encoding="utf-8")
    argv = ["--config", str(path), "--output-dir", str(tmp_path), "--jobs", "1", "encoder-test", "right"]
    assert main(argv) == 1
    assert "right: KeyAddressError" in caplog.text
    assert (tmp_path / "daqtyl_encoder-test.scad").exists()


def test_generate_config(tmp_path):
    path = tmp_path / "defaults.json"
    with pytest.raises(SystemExit) as exit_info:
        main(["--generate-config", str(path)])
    assert exit_info.value.code == 0
    assert json.loads(path.read_text(encoding="utf-8"))['nrows'] == 4
