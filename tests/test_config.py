"""
Unit tests for conversion/config.py

Run with: pytest tests/test_config.py -v
"""

import argparse
import json

import pytest

from conversion.channels import ChannelRoleMap
from conversion.config import (
    default_config,
    get_default_config_path,
    load_config,
    merge_config_with_args,
    role_map_from_config,
    validate_conversion_config,
)


def write_json(path, obj):
    path.write_text(json.dumps(obj), encoding="utf-8")
    return path


def make_args(**kwargs):
    base = dict(c3=None, c4=None, el=None, er=None, workers=None,
                overwrite=False, quiet=False, save_log=False)
    base.update(kwargs)
    return argparse.Namespace(**base)


class TestLoadConfig:
    def test_fills_defaults(self, tmp_path, capsys):
        path = write_json(tmp_path / "c.json", {"channels": {"c3": "C3-A2"}})
        config = load_config(path)
        assert config["channels"]["c3"] == "C3-A2"
        assert config["channels"]["er"] is None
        assert config["conversion"] == default_config()["conversion"]
        assert "[CONFIG] Loaded configuration from:" in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="not found"):
            load_config(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_config(path)

    def test_root_must_be_object(self, tmp_path):
        with pytest.raises(ValueError):
            load_config(write_json(tmp_path / "c.json", [1, 2]))

    def test_section_must_be_object(self, tmp_path):
        with pytest.raises(ValueError, match="conversion"):
            load_config(write_json(tmp_path / "c.json", {"conversion": 3}))

    def test_defaults_not_shared(self):
        a = default_config()
        a["channels"]["c3"] = "x"
        assert default_config()["channels"]["c3"] is None


class TestValidate:
    def test_defaults_valid(self):
        validate_conversion_config(default_config())

    def test_unknown_channel_key(self):
        config = default_config()
        config["channels"]["fz"] = "Fz"
        with pytest.raises(ValueError, match="Unknown channel keys"):
            validate_conversion_config(config)

    @pytest.mark.parametrize("label", ["", "   ", 3])
    def test_bad_label(self, label):
        config = default_config()
        config["channels"]["c4"] = label
        with pytest.raises(ValueError):
            validate_conversion_config(config)

    @pytest.mark.parametrize("workers", [0, -2, 1.5, "4", True])
    def test_bad_workers(self, workers):
        config = default_config()
        config["conversion"]["workers"] = workers
        with pytest.raises(ValueError):
            validate_conversion_config(config)

    def test_bad_switch(self):
        config = default_config()
        config["conversion"]["quiet"] = "yes"
        with pytest.raises(ValueError):
            validate_conversion_config(config)

    def test_missing_section(self):
        with pytest.raises(ValueError, match="Missing required section"):
            validate_conversion_config({"channels": {}})


class TestMerge:
    def test_cli_overrides_channels(self):
        config = default_config()
        config["channels"]["c3"] = "C3-M2"
        merged = merge_config_with_args(config, make_args(c3="C3-A2", el="LOC"))
        assert merged["channels"]["c3"] == "C3-A2"
        assert merged["channels"]["el"] == "LOC"
        assert merged["channels"]["c4"] is None

    def test_workers_override(self, capsys):
        merged = merge_config_with_args(default_config(), make_args(workers=3))
        assert merged["conversion"]["workers"] == 3
        assert "[OVERRIDE] workers = 3" in capsys.readouterr().out

    def test_switches_only_turn_on(self):
        config = default_config()
        config["conversion"]["quiet"] = True
        merged = merge_config_with_args(config, make_args(overwrite=True))
        assert merged["conversion"]["quiet"] is True
        assert merged["conversion"]["overwrite"] is True
        assert merged["conversion"]["save_log"] is False


class TestRoleMap:
    def test_complete(self):
        config = default_config()
        config["channels"].update(c3="C3-A2", c4="C4-A1", el="EOGl-A2", er="EOGr-A1")
        assert role_map_from_config(config) == ChannelRoleMap("c3-a2", "c4-a1", "eogl-a2", "eogr-a1")

    def test_incomplete(self):
        config = default_config()
        config["channels"].update(c3="C3-A2", c4="C4-A1")
        assert role_map_from_config(config) is None


def test_default_config_path():
    path = get_default_config_path()
    assert path.name == "config.json"
    assert path.parent.name == "conversion"
