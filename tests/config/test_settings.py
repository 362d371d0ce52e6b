import importlib
import logging

import pytest

settings_mod = importlib.import_module("delayprobe.config.settings")


def test_constants_match_endpoint_and_metric():
    """Constantes do probe: endpoint statsd, métrica e intervalo fixo."""
    assert (settings_mod.DEFAULT_HOST, settings_mod.DEFAULT_PORT) == ("localhost", 8125)
    assert settings_mod.METRIC_NAME == "test.core.delay"
    assert settings_mod.DELAY_MS == 3000
    assert settings_mod.SAMPLE_CEILING == 1000.0


def test_read_env_file_skips_comments_and_quotes(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text('# x\n\nDELAYPROBE_HOST="a.b"\nINVALID\nDELAYPROBE_PORT = 1\n', encoding="utf-8")
    assert settings_mod._read_env_file(env_file) == {"DELAYPROBE_HOST": "a.b", "DELAYPROBE_PORT": "1"}
    assert settings_mod._read_env_file(tmp_path / "nope.env") == {}


def test_load_settings_env_overrides_file(monkeypatch, tmp_path):
    """Variáveis do processo sobrescrevem o .env e só chaves DELAYPROBE_* são devolvidas."""
    env_file = tmp_path / ".env"
    env_file.write_text("DELAYPROBE_HOST=from-file\nDELAYPROBE_PORT=1000\nOTHER=1\n", encoding="utf-8")
    monkeypatch.setenv("DELAYPROBE_ENV_FILE", str(env_file))
    monkeypatch.setenv("DELAYPROBE_PORT", "2000")

    cfg = settings_mod.load_settings()
    assert cfg["DELAYPROBE_HOST"] == "from-file"
    assert cfg["DELAYPROBE_PORT"] == "2000"
    assert "OTHER" not in cfg


def test_empty_env_file_warns(monkeypatch, tmp_path, caplog):
    caplog.set_level(logging.WARNING)
    env_file = tmp_path / ".env"
    env_file.write_text("", encoding="utf-8")
    monkeypatch.setenv("DELAYPROBE_ENV_FILE", str(env_file))

    settings_mod.load_settings()
    assert any("ficheiro .env vazio" in r.getMessage() for r in caplog.records)


def test_probe_settings_is_frozen():
    s = settings_mod.ProbeSettings()
    assert s.interval_seconds == 3.0
    assert s.guarded is True
    with pytest.raises(AttributeError):
        s.port = 1
