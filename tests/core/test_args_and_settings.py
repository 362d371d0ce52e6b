from types import SimpleNamespace

import pytest

from delayprobe.config.settings import ProbeSettings
from delayprobe.core import args as args_mod


def test_configure_argparser_defaults():
    """Os padrões reproduzem o endpoint e o intervalo fixos."""
    ns = args_mod.configure_argparser().parse_args([])
    assert ns.host == "localhost"
    assert ns.port == 8125
    assert ns.metric == "test.core.delay"
    assert ns.interval_ms == 3000
    assert ns.ceiling == 1000.0
    assert ns.failure_policy == "guarded"
    assert ns.cycles == 0


def test_parse_args_and_settings():
    """Argumentos de CLI chegam ao ProbeSettings."""
    ns = args_mod.parse_args(["--port", "9125", "-i", "500", "-c", "2", "--failure-policy", "propagate", "-v"])
    s = ProbeSettings.from_namespace(ns)
    assert s.port == 9125
    assert s.interval_seconds == 0.5
    assert s.cycles == 2
    assert s.guarded is False
    assert s.verbose == 1


def test_env_overrides_only_defaults(monkeypatch):
    """Variáveis de ambiente substituem padrões, mas não valores da CLI."""
    monkeypatch.setenv("DELAYPROBE_HOST", "statsd.local")
    monkeypatch.setenv("DELAYPROBE_PORT", "9999")
    ns = args_mod.parse_args(["--port", "8200"])
    assert ns.host == "statsd.local"
    assert ns.port == 8200


def test_env_file_overrides(monkeypatch, tmp_path):
    """O arquivo .env é lido quando o ambiente não define a chave."""
    env_file = tmp_path / ".env"
    env_file.write_text("# comentário\nDELAYPROBE_METRIC='custom.delay'\nDELAYPROBE_CYCLES=5\n", encoding="utf-8")
    monkeypatch.setenv("DELAYPROBE_ENV_FILE", str(env_file))
    ns = args_mod.parse_args([])
    assert ns.metric == "custom.delay"
    assert ns.cycles == 5


def test_invalid_env_value_is_ignored(monkeypatch, caplog):
    monkeypatch.setenv("DELAYPROBE_INTERVAL_MS", "abc")
    ns = args_mod.parse_args([])
    assert ns.interval_ms == 3000
    assert any("DELAYPROBE_INTERVAL_MS inválido" in r.getMessage() for r in caplog.records)


def test_validate_args_errors():
    """Teste para validação de erros em argumentos."""
    base = dict(
        port=8125,
        interval_ms=3000,
        ceiling=1000.0,
        cycles=0,
        timeout=None,
        protocol="udp",
        failure_policy="guarded",
        metric="test.core.delay",
    )
    for bad in (
        {"port": 0},
        {"interval_ms": -1},
        {"ceiling": 0},
        {"cycles": -1},
        {"timeout": 0},
        {"protocol": "http"},
        {"failure_policy": "retry"},
        {"metric": " "},
    ):
        with pytest.raises(ValueError):
            args_mod.validate_args(SimpleNamespace(**{**base, **bad}))


def test_get_log_config_levels():
    """Teste para obtenção de níveis de configuração de log."""
    cfg = args_mod.get_log_config(SimpleNamespace(log_level="debug", log_root=None, verbose=0))
    assert cfg["level"] == "DEBUG"

    cfg2 = args_mod.get_log_config(SimpleNamespace(log_level=None, log_root=None, verbose=0))
    assert cfg2["level"] == "INFO"

    cfg3 = args_mod.get_log_config(SimpleNamespace(log_level=None, log_root="/tmp", verbose=2))
    assert cfg3["level"] == "DEBUG"
    assert cfg3["root"] == "/tmp"
