import os

import pytest

from present.config import read_config, read_state_path, remote_enabled


@pytest.fixture
def cfg(tmp_path):
    p = tmp_path / "present.yml"
    p.write_text(
        "# comment\n"
        "state_file: '~/decks/state.json'\n"
        "remote: off\n"
        "port: 1234\n"
        "port: 999\n"
        "not a setting\n"
        "empty:\n",
        encoding="utf-8",
    )
    return str(p)


def test_parses_file_once_into_dict(cfg):
    assert read_config(cfg) == {
        "state_file": "~/decks/state.json",
        "remote": "off",
        "port": "1234",
    }


def test_missing_file_reads_empty(tmp_path):
    assert read_config(str(tmp_path / "none.yml")) == {}


def test_state_path(cfg, tmp_path):
    assert read_state_path(cfg) == os.path.expanduser("~/decks/state.json")
    assert read_state_path(settings={}) == os.path.expanduser("~/.present_state.json")


def test_remote_switch(cfg, tmp_path):
    assert remote_enabled(cfg) is False
    assert remote_enabled(str(tmp_path / "none.yml")) is True
    assert remote_enabled(settings={"remote": "On"}) is True
    assert remote_enabled(settings={"remote": "NO"}) is False
