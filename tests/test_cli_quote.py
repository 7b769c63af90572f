from __future__ import annotations

import json

from stakelock.cli import main
from stakelock.testing.harness import DAY


def test_quote_mid_unlock(capsys) -> None:
    rc = main(["quote", "--balance", "10000", "--anchor", "0", "--at", str(45 * DAY)])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["phase"] == "unlocked"
    assert out["earnings"] == "305"
    assert out["lock_portion"] + out["unlock_portion"] == 45 * DAY


def test_quote_with_yaml_schedule(tmp_path, capsys) -> None:
    cfg = tmp_path / "s.yaml"
    cfg.write_text("unlock_duration: 0\n", encoding="utf-8")
    rc = main(["quote", "--balance", "10000", "--anchor", "0", "--at", str(15 * DAY), "--config", str(cfg)])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["phase"] == "unlocked"
    assert out["lock_earnings"] == "150"


def test_quote_rejects_reference_before_anchor(capsys) -> None:
    rc = main(["quote", "--balance", "1", "--anchor", "100", "--at", "50"])
    assert rc == 2
    assert "invalid_time_range" in capsys.readouterr().err
