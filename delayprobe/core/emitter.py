"""Registo local das emissões extraído de `core`.

Contém a formatação da linha humana, a impressão curta/longa e a escrita no
feed JSONL ``emissions`` e nos contadores do exporter. Mantido em módulo
separado para reduzir responsabilidades do `core` e facilitar testes.
"""

import logging

from ..exporter.prometheus import observe_emission
from ..system.logs import write_log

FEED_NAME = "emissions"


def _format_human_msg(metric: str, value: float, ok: bool, error: BaseException | None = None) -> str:
    if ok:
        return f"{metric}={value:.3f}ms enviado"
    return f"{metric}={value:.3f}ms falhou: {error}"


def _print_emission_short(metric: str, value: float, ok: bool) -> None:
    """Imprima um resumo curto da emissão no stdout."""
    print(f"{'OK' if ok else 'FALHA'} {metric} {value:.1f}ms")


def _print_emission_long(metric: str, value: float, ok: bool, error: BaseException | None) -> None:
    """Imprima a emissão com o detalhe do erro, quando houver."""
    print(_format_human_msg(metric, value, ok, error))
    if error is not None and error.__cause__ is not None:
        print(f"  causa: {error.__cause__!r}")


def record_emission(
    metric: str,
    value: float,
    ok: bool,
    error: BaseException | None = None,
    verbose_level: int = 0,
) -> None:
    """Registe uma emissão no feed JSON, no exporter e opcionalmente no stdout.

    - escreve uma entrada JSON no feed ``emissions`` para ingestão
    - atualiza os contadores do exporter Prometheus
    - se verbose_level > 0, imprime saída humana (curta/longa)

    Falhas de registo nunca interrompem o loop.
    """
    logger = logging.getLogger(__name__)
    extra = {"metric": metric, "value": value, "ok": ok}
    if error is not None:
        extra["error"] = str(error)

    try:
        write_log(FEED_NAME, "INFO" if ok else "ERROR", _format_human_msg(metric, value, ok, error), extra=extra)
    except Exception:
        logger.debug("Falha ao escrever emissão no feed %s", FEED_NAME, exc_info=True)

    try:
        observe_emission(metric, value, ok)
    except Exception:
        logger.debug("Falha ao atualizar exporter", exc_info=True)

    if not verbose_level:
        return

    if verbose_level == 1:
        _print_emission_short(metric, value, ok)
    else:
        _print_emission_long(metric, value, ok, error)
