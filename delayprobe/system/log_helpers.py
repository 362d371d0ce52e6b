"""Helpers de baixo nível para o subsistema de logging.

Fornece escrita durável com lock exclusivo, serialização JSONL e
normalização de nomes de ficheiro.
"""

from pathlib import Path
import os
from datetime import date
import logging
import json as _json
import re

import portalocker

logger = logging.getLogger(__name__)

# fsync por escrita é opt-in: o feed é escrito dentro do loop de emissão
DURABLE_WRITES = os.environ.get("DELAYPROBE_DURABLE_WRITES", "0").lower() in ("1", "true", "yes", "on")


# -----------------------
# Escrita segura
# -----------------------
def write_text(path: Path, text: str) -> None:
    """Anexe texto a `path` de forma segura, usando lock e fsync quando possível.

    Cria o diretório pai e aplica um lock exclusivo via `portalocker`. Em caso
    de falha de I/O grava um erro no logger e segue em modo best-effort.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            locked = False
            try:
                try:
                    portalocker.lock(fh, portalocker.LOCK_EX)
                    locked = True
                except portalocker.LockException as exc:
                    logger.debug("write_text: portalocker.lock falhou em %s: %s", path, exc)

                fh.write(text)
                fh.flush()

                if DURABLE_WRITES:
                    try:
                        os.fsync(fh.fileno())
                    except OSError as exc:
                        logger.debug("write_text: fsync falhou em %s: %s", path, exc)
            finally:
                if locked:
                    try:
                        portalocker.unlock(fh)
                    except portalocker.LockException as exc:
                        logger.debug("write_text: portalocker.unlock falhou em %s: %s", path, exc)
    except OSError as exc:
        logger.error("write_text: falhou em %s: %s", path, exc, exc_info=True)


def write_json(path: Path, obj: dict) -> None:
    """Serialize um objeto como JSONL e anexe ao ficheiro `path`.

    Em caso de objetos não serializáveis por padrão, usa `default=str` como
    fallback e regista o erro.
    """
    try:
        line = _json.dumps(obj, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as exc:
        line = _json.dumps(obj, ensure_ascii=False, default=str) + "\n"
        logger.error("write_json: fallback default=str usado em %s: %s", path, exc)
    write_text(path, line)


# -----------------------
# Normalização e formatação
# -----------------------
def sanitize_log_name(raw_name: str, fallback: str = "debug_log") -> str:
    """Sanitize o nome base de um ficheiro de log para uso seguro no filesystem.

    Remove caracteres potencialmente perigosos e limita o comprimento.
    """
    rn = Path(raw_name or fallback).name.lstrip(".")
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", rn)
    if not name:
        name = fallback
    return name[:200]


def build_json_entry(ts: str, level: str, msg, extra: dict | None = None) -> dict:
    """Construa um dicionário pronto para ser serializado em JSONL.

    Insere campos `ts`, `level`, `msg` e mescla `extra` quando fornecido.
    """
    entry = {"ts": ts, "level": level, "msg": msg}
    if extra and isinstance(extra, dict):
        for k, v in extra.items():
            entry[k if k not in entry else f"extra_{k}"] = v
    elif extra:
        entry["meta"] = extra
    return entry


def format_date_for_log() -> str:
    """Retorna a data de hoje no formato YYYY-MM-DD (segura para nomes)."""
    return date.today().isoformat()


# -----------------------
# Diretórios / permissões
# -----------------------
def ensure_dir_writable(p: Path) -> bool:
    """Garante, em melhor esforço, que `p` existe e é gravável."""
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("ensure_dir_writable: failed for %s: %s", p, exc, exc_info=True)
        return False
    if not os.access(p, os.W_OK):
        logger.error("ensure_dir_writable: permission denied writing to %s", p)
        return False
    return True
