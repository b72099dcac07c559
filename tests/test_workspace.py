"""Tests for core/workspace.py, core/fileio.py and core/logging.py."""

import logging
import re

from core.fileio import locked, read_json, read_yaml, write_json_atomic, write_yaml_atomic
from core.logging import setup_logging
from core.workspace import (
    get_user_timezone,
    habits_path,
    load_profile,
    now_iso,
    today_str,
    workspace_root,
)


def test_workspace_root_from_env(workspace):
    assert workspace_root() == workspace.resolve()
    assert habits_path() == workspace.resolve() / "habits.yaml"


def test_load_profile_merges_defaults(tmp_path):
    (tmp_path / "profile.yaml").write_text("timezone: Europe/Paris\n", encoding="utf-8")
    profile = load_profile(tmp_path)
    assert profile["timezone"] == "Europe/Paris"
    assert profile["default_period"] == "30days"


def test_bad_timezone_falls_back_to_utc(tmp_path):
    (tmp_path / "profile.yaml").write_text("timezone: Mars/Olympus\n", encoding="utf-8")
    assert get_user_timezone(tmp_path).key == "UTC"


def test_today_and_now(workspace):
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", today_str(workspace))
    assert now_iso(workspace).startswith(today_str(workspace)[:4])


def test_read_missing_and_empty(tmp_path):
    assert read_json(tmp_path / "missing.json") == {}
    (tmp_path / "empty.yaml").write_text("", encoding="utf-8")
    assert read_yaml(tmp_path / "empty.yaml") == {}


def test_atomic_writes_round_trip(tmp_path):
    write_json_atomic(tmp_path / "sub" / "a.json", {"x": [1, 2]})
    write_yaml_atomic(tmp_path / "b.yaml", {"y": {"z": "é"}})
    assert read_json(tmp_path / "sub" / "a.json") == {"x": [1, 2]}
    assert read_yaml(tmp_path / "b.yaml") == {"y": {"z": "é"}}
    assert not list(tmp_path.glob(".tmp_*"))


def test_locked_creates_sibling_lock(tmp_path):
    target = tmp_path / "habits.yaml"
    with locked(target):
        write_yaml_atomic(target, {"habits": []})
    assert (tmp_path / "habits.yaml.lock").exists()
    assert read_yaml(target) == {"habits": []}


def test_setup_logging_uses_profile_level(workspace):
    setup_logging(root=workspace)
    assert logging.getLogger().level == logging.DEBUG
    setup_logging(level="warning")
    assert logging.getLogger().level == logging.WARNING
