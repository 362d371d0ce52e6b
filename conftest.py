# conftest.py
# Configuração global para pytest: isola a raiz de logs de cada teste em tmp_path
import pytest

from delayprobe.system import logs as _logs


@pytest.fixture(autouse=True)
def _isolated_log_root(tmp_path, monkeypatch):
    monkeypatch.setenv("DELAYPROBE_LOG_ROOT", str(tmp_path / "logs"))
    monkeypatch.setenv("DELAYPROBE_ENV_FILE", str(tmp_path / "missing.env"))
    monkeypatch.setattr(_logs, "_log_root_override", None)
    yield
