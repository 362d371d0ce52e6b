"""
Exportação local das emissões do probe no padrão Prometheus.

Mantém um registry próprio com contadores de emissões (por resultado) e o
valor da última amostra enviada. O servidor HTTP só é iniciado quando
``DELAYPROBE_EXPORTER_ENABLE`` está ativo (ver ``delayprobe.main``).
"""

import logging
import os

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)

REGISTRY = CollectorRegistry()

EMISSIONS = Counter(
    "delayprobe_emissions",
    "Emissões de timing tentadas, por resultado",
    ["metric", "outcome"],
    registry=REGISTRY,
)
LAST_SAMPLE = Gauge(
    "delayprobe_last_sample_ms",
    "Valor da última amostra enviada com sucesso",
    ["metric"],
    registry=REGISTRY,
)

_server_started = False


def start_exporter(port: int | None = None, addr: str | None = None) -> bool:
    """Inicia o servidor HTTP do exporter no endereço e porta informados.

    Porta e endereço vêm de `DELAYPROBE_EXPORTER_PORT` / `DELAYPROBE_EXPORTER_ADDR`
    quando não informados. Retorna True se o servidor estiver ativo.
    """
    global _server_started
    if _server_started:
        logger.debug("prometheus exporter already started")
        return True

    if addr is None:
        addr = os.getenv("DELAYPROBE_EXPORTER_ADDR", "127.0.0.1")
    if port is None:
        try:
            port = int(os.getenv("DELAYPROBE_EXPORTER_PORT", "9108"))
        except ValueError:
            port = 9108

    try:
        start_http_server(port, addr, registry=REGISTRY)
    except OSError as exc:
        logger.warning("Falha ao iniciar Prometheus exporter em %s:%d: %s", addr, port, exc)
        return False
    _server_started = True
    logger.info("Prometheus exporter iniciado em %s:%d", addr, port)
    return True


def observe_emission(metric: str, value: float, ok: bool) -> None:
    """Atualiza contadores para uma emissão; a gauge só muda em sucesso."""
    # valores de label aceitam qualquer UTF-8; o nome statsd segue intacto
    EMISSIONS.labels(metric=metric, outcome="ok" if ok else "error").inc()
    if ok:
        LAST_SAMPLE.labels(metric=metric).set(float(value))
