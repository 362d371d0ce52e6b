import importlib
import json
from datetime import date

from delayprobe.system import log_helpers as lh


def test_sanitize_log_name():
    assert lh.sanitize_log_name("../etc/pass wd") == "pass_wd"
    assert lh.sanitize_log_name("", "fallback") == "fallback"
    assert len(lh.sanitize_log_name("a" * 500)) == 200


def test_build_json_entry_merges_extra_without_clobbering():
    entry = lh.build_json_entry("t", "INFO", "m", {"msg": "x", "value": 2})
    assert entry == {"ts": "t", "level": "INFO", "msg": "m", "extra_msg": "x", "value": 2}
    assert lh.build_json_entry("t", "INFO", "m", ["a"])["meta"] == ["a"]


def test_format_date_for_log_is_today():
    assert lh.format_date_for_log() == date.today().isoformat()


def test_write_json_appends_lines_and_falls_back(tmp_path):
    p = tmp_path / "sub" / "feed.jsonl"
    lh.write_json(p, {"a": 1})
    lh.write_json(p, {"when": date(2024, 1, 2)})
    lines = p.read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[0]) == {"a": 1}
    assert json.loads(lines[1]) == {"when": "2024-01-02"}


def test_write_text_without_fsync(tmp_path, monkeypatch):
    monkeypatch.setattr(lh, "DURABLE_WRITES", False)
    p = tmp_path / "x.log"
    lh.write_text(p, "one\n")
    lh.write_text(p, "two\n")
    assert p.read_text(encoding="utf-8") == "one\ntwo\n"


def test_durable_writes_off_by_default_and_opt_in(tmp_path, monkeypatch):
    """fsync por escrita só acontece com DELAYPROBE_DURABLE_WRITES ativo."""
    monkeypatch.delenv("DELAYPROBE_DURABLE_WRITES", raising=False)
    try:
        assert importlib.reload(lh).DURABLE_WRITES is False

        monkeypatch.setenv("DELAYPROBE_DURABLE_WRITES", "1")
        mod = importlib.reload(lh)
        assert mod.DURABLE_WRITES is True

        synced = []
        monkeypatch.setattr(mod.os, "fsync", lambda fd: synced.append(fd))
        mod.write_text(tmp_path / "d.log", "x\n")
        assert len(synced) == 1
    finally:
        monkeypatch.delenv("DELAYPROBE_DURABLE_WRITES", raising=False)
        importlib.reload(lh)
