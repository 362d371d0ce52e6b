"""Subsistema de logs: layout de diretórios e persistência de feeds.

Fornece helpers de nível superior para escrita de feeds estruturados (.jsonl)
e o caminho do arquivo diário de debug.
"""

import os
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .log_helpers import (
    build_json_entry,
    ensure_dir_writable,
    format_date_for_log,
    sanitize_log_name,
    write_json,
)

logger = logging.getLogger(__name__)

# ========================
# 0. Configuração padrão
# ========================

LOG_ROOT = (os.getenv("DELAYPROBE_LOG_ROOT") or "logs").strip() or "logs"

DEBUG_LOG_FILENAME = "debug_log"

_log_root_override: Path | None = None


# Usado por delayprobe.main quando --log-root é informado
def set_log_root(root: str | Path | None) -> None:
    """Define a raiz de logs do processo (None volta ao ambiente/padrão)."""
    global _log_root_override
    _log_root_override = Path(root) if root else None


# ========================
# 1. Diretórios e Paths
# ========================


@dataclass(frozen=True)
# Representa os diretórios usados pelo subsistema de logs
class LogPaths:
    """Agrupa caminhos usados pelo subsistema de logging."""

    root: Path
    json_dir: Path
    debug_dir: Path

    def __iter__(self):
        return iter((self.root, self.json_dir, self.debug_dir))


def _resolve_root(root: str | Path | None) -> Path:
    # prioridade: argumento > set_log_root > ambiente > LOG_ROOT
    if root:
        return Path(root)
    if _log_root_override is not None:
        return _log_root_override
    return Path(os.getenv("DELAYPROBE_LOG_ROOT") or LOG_ROOT)


def get_log_paths(root: str | Path | None = None) -> LogPaths:
    """Resolve raiz de logs e garante diretórios criados e graváveis."""
    log_root = _resolve_root(root)
    paths = LogPaths(log_root, log_root / "json", log_root / "debug")
    for p in paths:
        ensure_dir_writable(p)
    return paths


# Gera o nome base para arquivos de log; consumido por write_log
def _resolve_filename(name: str) -> str:
    """Gera nome base de arquivo de log com data: ``<name>-YYYY-MM-DD``."""
    base = sanitize_log_name(name or DEBUG_LOG_FILENAME, DEBUG_LOG_FILENAME)
    return f"{base}-{format_date_for_log()}"


# ========================
# 2. Escrita de Logs
# ========================


# Escreve uma entrada em .jsonl; alimenta análise e ingestão
def write_log(name: str, level: str, message: str, extra: dict | None = None) -> None:
    """Grava uma mensagem no feed jsonl diário nomeado a partir de `name`.

    `extra` é mesclado na entrada JSON.
    """
    filename = _resolve_filename(name)
    lp = get_log_paths()

    entry = build_json_entry(datetime.now(timezone.utc).isoformat(), level, message, extra)
    write_json(lp.json_dir / f"{filename}.jsonl", entry)


# Retorna o caminho do arquivo de debug do dia; usado por debug logging
def get_debug_file_path() -> Path:
    """Retorna caminho do arquivo de debug diário."""
    filename = f"{DEBUG_LOG_FILENAME}-{format_date_for_log()}.txt"
    return get_log_paths().debug_dir / filename


# Verifica e restabelece diretórios de logs se necessários
def ensure_log_dirs_exist(root: str | Path | None = None) -> None:
    """Garante existência dos diretórios de logs e recria se faltarem.

    Faz checagens leves (Path.exists()) e só escala para a criação completa
    quando um caminho estiver ausente.
    """
    log_root = _resolve_root(root)
    expected = (log_root, log_root / "json", log_root / "debug")
    if not all(p.exists() for p in expected):
        get_log_paths(root)
