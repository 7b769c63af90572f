from __future__ import annotations

import json
import logging
import os

import pytest

from stakelock import env
from stakelock.runtime.log import log_event
from stakelock.testing.harness import fund_user, make_pool

def test_dotenv_loaded_once_without_overriding(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    p = tmp_path / ".env"
    p.write_text("STAKELOCK_OWNER=from-file\nSTAKELOCK_TOKEN_ADDRESS=0xfile\n", encoding="utf-8")
    monkeypatch.setattr(env, "_LOADED", False)
    monkeypatch.setenv("STAKELOCK_OWNER", "from-env")
    monkeypatch.setenv("STAKELOCK_TOKEN_ADDRESS", "placeholder")
    monkeypatch.delenv("STAKELOCK_TOKEN_ADDRESS")

    assert env.load_dotenv_if_present(str(p)) is True
    assert os.environ["STAKELOCK_OWNER"] == "from-env"
    assert os.environ["STAKELOCK_TOKEN_ADDRESS"] == "0xfile"
    assert env.load_dotenv_if_present(str(p)) is False

def test_missing_dotenv_is_not_an_error(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(env, "_LOADED", False)
    assert env.load_dotenv_if_present(str(tmp_path / "nope.env")) is False

def test_log_event_is_one_json_object(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("stakelock.test")
    with caplog.at_level(logging.INFO, logger="stakelock.test"):
        log_event(logger, "something", user="alice", amount=3)
    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "something"
    assert payload["user"] == "alice"
    assert payload["amount"] == 3

def test_committed_records_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    pool, custody, _ = make_pool()
    fund_user(custody, "alice", 7)
    with caplog.at_level(logging.INFO, logger="stakelock.events"):
        pool.deposit("alice", 7)
    events = [json.loads(r.getMessage()) for r in caplog.records if r.name == "stakelock.events"]
    assert [e["event"] for e in events] == ["account_changed", "deposit_replenished"]
    assert events[1]["amount"] == "7"
