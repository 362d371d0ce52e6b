"""Ponto de entrada do probe de delay.

Este módulo realiza a inicialização da aplicação: parsing de argumentos CLI,
configuração de logging, instalação de handlers de debug, exporter opcional,
construção do cliente statsd e execução do loop supervisionado. Mantemos a
lógica de runtime em `core` para facilitar testes e reutilização.
"""

import asyncio
import json as _json
import logging as _logging
import os
import sys
import traceback as _tb

from .config.settings import ProbeSettings
from .core.args import configure_argparser, get_log_config, parse_args
from .core.client import TransmissionError, build_client
from .core.core import EXIT_FAILURE, supervise
from .exporter.prometheus import start_exporter
from .system.logs import ensure_log_dirs_exist, get_debug_file_path, set_log_root

_TRUTHY = ("1", "true", "yes", "on")


def main(argv: list[str] | None = None) -> int:
    """Inicializa a aplicação e executa o loop de emissão.

    Args:
        argv: Lista de argumentos (usada em testes). Quando ``None`` a função
            utiliza os argumentos de linha de comando do processo.

    Returns:
        Código de saída do processo (0 = término normal/cancelamento).

    """
    try:
        args = parse_args(argv)
    except ValueError as exc:
        configure_argparser().error(str(exc))
    log_conf = get_log_config(args)

    level = getattr(_logging, log_conf.get("level", "INFO"), _logging.INFO)
    _logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger = _logging.getLogger(__name__)

    if log_conf.get("root"):
        set_log_root(log_conf["root"])
    ensure_log_dirs_exist()

    try:
        _setup_debug_file_handler()
    except OSError as exc:
        logger.debug("falha ao configurar debug file handler: %s", exc, exc_info=True)

    if os.getenv("DELAYPROBE_EXPORTER_ENABLE", "0").lower() in _TRUTHY:
        start_exporter()

    settings = ProbeSettings.from_namespace(args)
    try:
        client = build_client(settings)
    except TransmissionError as exc:
        logger.error("Não foi possível criar o cliente de métricas: %s", exc)
        return EXIT_FAILURE

    try:
        return asyncio.run(supervise(client, settings))
    finally:
        client.close()


def _setup_debug_file_handler() -> None:
    """Instala handlers de ficheiro para debug e hook global de exceções.

    Adiciona dois handlers ao logger root: um human-readable (texto) e um
    JSONL (uma linha de JSON por evento) para ingestão. Também instala um
    ``sys.excepthook`` que envia exceções não tratadas para o logger root.

    Evita duplicar handlers se já existirem handlers de ficheiro com os
    mesmos caminhos.
    """
    debug_path = get_debug_file_path()
    jpath = debug_path.with_suffix(".jsonl")
    root = _logging.getLogger()

    if not _has_existing_file_handler(root, (os.path.abspath(debug_path), os.path.abspath(jpath))):
        fh = _logging.FileHandler(str(debug_path), encoding="utf-8")
        fh.setLevel(_logging.INFO)
        fh.setFormatter(_logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

        jfh = _logging.FileHandler(str(jpath), encoding="utf-8")
        jfh.setLevel(_logging.INFO)
        jfh.setFormatter(_JSONFormatter())

        root.addHandler(fh)
        root.addHandler(jfh)

    def _exc_hook(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        root.error("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))

    sys.excepthook = _exc_hook


class _JSONFormatter(_logging.Formatter):
    def format(self, record):
        obj = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            obj["exc"] = "".join(_tb.format_exception(*record.exc_info))
        return _json.dumps(obj, ensure_ascii=False)


def _has_existing_file_handler(root, paths) -> bool:
    return any(
        isinstance(h, _logging.FileHandler) and getattr(h, "baseFilename", None) in paths for h in root.handlers
    )


if __name__ == "__main__":
    sys.exit(main())
