"""Core do probe de delay.

Loop de emissão (gerar amostra -> enviar -> esperar) e o supervisor que o
executa como uma task asyncio explícita, com handler terminal e código de
saída.
"""

import asyncio
import logging
import random
import signal

from .client import TransmissionError
from .emitter import record_emission as _record_emission
from ..config.settings import STARTUP_MARKER

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

TASK_NAME = "emission-loop"


# ========================
# 1. Funções auxiliares de uma iteração
# ========================


def generate_sample(rng: random.Random | None = None, ceiling: float = 1000.0) -> float:
    """Gera uma amostra uniforme em [0, ceiling)."""
    source = rng if rng is not None else random
    value = source.random() * ceiling
    # random() * ceiling pode arredondar para ceiling em floats
    return value if value < ceiling else 0.0


def _transmit(client, settings, value: float) -> bool:
    """Envia a amostra conforme a política de falhas.

    Com a política ``guarded`` a ``TransmissionError`` é registada e
    descartada; com ``propagate`` ela é registada no feed e sobe, terminando
    a task (o log do erro fica a cargo do handler terminal).
    """
    if not settings.guarded:
        try:
            client.timing(settings.metric_name, value)
        except TransmissionError as exc:
            _record_emission(settings.metric_name, value, False, error=exc, verbose_level=settings.verbose)
            raise
        logger.debug("%s=%.3f enviado", settings.metric_name, value)
        _record_emission(settings.metric_name, value, True, verbose_level=settings.verbose)
        return True

    try:
        client.timing(settings.metric_name, value)
    except TransmissionError as exc:
        logger.error("Falha ao enviar %s=%.3f: %s", settings.metric_name, value, exc)
        _record_emission(settings.metric_name, value, False, error=exc, verbose_level=settings.verbose)
        return False
    logger.info("%s=%.3f enviado", settings.metric_name, value)
    _record_emission(settings.metric_name, value, True, verbose_level=settings.verbose)
    return True


# ========================
# 2. Loop principal de emissão
# ========================


# Função principal do módulo; executa o ciclo gerar -> enviar -> esperar
async def run_loop(client, settings, *, rng=None, sleep=asyncio.sleep, stop: asyncio.Event | None = None) -> int:
    """Loop de emissão; retorna o número de iterações executadas.

    Parâmetros:
        client: objeto com ``timing(name, value)`` (ver ``core.client``).
        settings: ``ProbeSettings`` com métrica, intervalo e política.
        rng: fonte de aleatoriedade (``random.Random``); padrão é o módulo random.
        sleep: função async de espera; injetável para testes com relógio falso.
        stop: evento verificado no início de cada iteração.

    O único ponto de suspensão é a espera fixa de ``settings.interval_ms``;
    o intervalo não depende da amostra.
    """
    executed = 0
    delay = settings.interval_seconds
    while stop is None or not stop.is_set():
        value = generate_sample(rng, settings.sample_ceiling)
        _transmit(client, settings, value)
        executed += 1
        if settings.cycles and executed >= settings.cycles:
            break
        await sleep(delay)
    return executed


# ========================
# 3. Supervisor (wrapper de topo)
# ========================


def report_outcome(task: asyncio.Task) -> None:
    """Handler terminal da task de emissão; chamado uma única vez."""
    if task.cancelled():
        logger.info("Loop de emissão cancelado")
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Loop de emissão terminou com erro: %s", exc, exc_info=exc)
        return
    logger.info("Loop de emissão terminou após %d emissões", task.result())


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, task: asyncio.Task) -> None:
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, task.cancel)
        except (NotImplementedError, RuntimeError, ValueError) as exc:
            # Windows / thread secundária: sem handlers, apenas KeyboardInterrupt
            logger.debug("add_signal_handler(%s) indisponível: %s", sig, exc)


def _remove_signal_handlers(loop: asyncio.AbstractEventLoop) -> None:
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.remove_signal_handler(sig)
        except (NotImplementedError, RuntimeError, ValueError):
            pass


async def supervise(
    client,
    settings,
    *,
    rng=None,
    sleep=asyncio.sleep,
    stop: asyncio.Event | None = None,
    on_done=report_outcome,
    install_signals: bool = True,
) -> int:
    """Executa o loop como task supervisionada e devolve o código de saída.

    Regista o marcador de arranque, cria a task ``emission-loop``, anexa o
    handler terminal ``on_done`` e, quando pedido, liga SIGINT/SIGTERM ao
    cancelamento da task.
    """
    logger.info(STARTUP_MARKER)
    loop = asyncio.get_running_loop()
    task = loop.create_task(run_loop(client, settings, rng=rng, sleep=sleep, stop=stop), name=TASK_NAME)
    task.add_done_callback(on_done)
    if install_signals:
        _install_signal_handlers(loop, task)
    try:
        await task
    except asyncio.CancelledError:
        if not task.cancelled():
            # o próprio supervisor foi cancelado
            raise
        return EXIT_OK
    except Exception:
        # já reportado por on_done
        return EXIT_FAILURE
    finally:
        if install_signals:
            _remove_signal_handlers(loop)
    return EXIT_OK
