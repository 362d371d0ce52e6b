"""Parser de argumentos do probe.

Docstrings e mensagens em português.

Este módulo fornece um parser simples que expõe:
- endpoint statsd (--host / --port / --protocol / --prefix / --timeout)
- identidade e forma da amostra (--metric / --ceiling)
- intervalo fixo entre emissões (-i / --interval-ms)
- política de falhas de envio (--failure-policy)
- número de ciclos (-c / --cycles), 0 = infinito
- verbosidade (-v) e opções de logging (nível e caminho raiz)

As funções retornam objetos compatíveis com argparse.Namespace para
serem consumidos por `delayprobe.main`.
"""

import argparse
import logging
from typing import Sequence

from ..config.settings import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DELAY_MS,
    FAILURE_POLICIES,
    METRIC_NAME,
    POLICY_GUARDED,
    PROTOCOL_UDP,
    PROTOCOLS,
    SAMPLE_CEILING,
    load_settings,
)

# ========================
# 0. Configuração do parser e argumentos padrão
# ========================


# Função principal do módulo; cria e retorna o ArgumentParser configurado
def configure_argparser() -> argparse.ArgumentParser:
    """Cria e retorna ArgumentParser configurado para o probe."""
    parser = argparse.ArgumentParser(
        prog="delayprobe",
        description="Emite periodicamente uma métrica de timing sintética para um daemon statsd",
    )

    parser.add_argument("--host", type=str, default=DEFAULT_HOST, help="Host do daemon statsd")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Porta do daemon statsd")
    parser.add_argument(
        "--protocol",
        choices=list(PROTOCOLS),
        default=PROTOCOL_UDP,
        help="Transporte usado pelo cliente statsd",
    )
    parser.add_argument("--prefix", type=str, default=None, help="Prefixo opcional para o nome da métrica")
    parser.add_argument("--metric", type=str, default=METRIC_NAME, help="Nome da métrica de timing")
    parser.add_argument(
        "-i",
        "--interval-ms",
        dest="interval_ms",
        type=int,
        default=DELAY_MS,
        help="Intervalo fixo em milissegundos entre emissões",
    )
    parser.add_argument(
        "--ceiling",
        type=float,
        default=SAMPLE_CEILING,
        help="Teto (exclusivo) das amostras geradas",
    )
    parser.add_argument(
        "--failure-policy",
        dest="failure_policy",
        choices=list(FAILURE_POLICIES),
        default=POLICY_GUARDED,
        help="'guarded' regista e continua; 'propagate' termina o loop na primeira falha",
    )
    parser.add_argument(
        "-c",
        "--cycles",
        type=int,
        default=0,
        help="Número de emissões a executar (0 = infinito)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout em segundos para o transporte TCP",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Aumenta a verbosidade (-v, -vv)",
    )
    parser.add_argument(
        "--log-root",
        dest="log_root",
        type=str,
        default=None,
        help="Caminho raiz para os logs (substitui DELAYPROBE_LOG_ROOT)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        type=str,
        default=None,
        help="Nível de logging (DEBUG/INFO/WARNING/ERROR). Se ausente, definido por -v",
    )

    return parser


# ========================
# 1. Funções auxiliares para análise e validação de argumentos
# ========================

# Mapeamento de argumentos para variáveis de ambiente
ENV_MAP = {
    "host": "DELAYPROBE_HOST",
    "port": "DELAYPROBE_PORT",
    "protocol": "DELAYPROBE_PROTOCOL",
    "prefix": "DELAYPROBE_PREFIX",
    "metric": "DELAYPROBE_METRIC",
    "interval_ms": "DELAYPROBE_INTERVAL_MS",
    "ceiling": "DELAYPROBE_SAMPLE_CEILING",
    "failure_policy": "DELAYPROBE_FAILURE_POLICY",
    "cycles": "DELAYPROBE_CYCLES",
    "timeout": "DELAYPROBE_TIMEOUT",
    "verbose": "DELAYPROBE_VERBOSE",
    "log_root": "DELAYPROBE_LOG_ROOT",
    "log_level": "DELAYPROBE_LOG_LEVEL",
}

_INT_ARGS = ("port", "interval_ms", "cycles", "verbose")
_FLOAT_ARGS = ("ceiling", "timeout")


# Auxilia delayprobe.main; criado para analisar argv e validar argumentos
def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Analisa argv e retorna Namespace validado para uso no programa."""
    parser = configure_argparser()
    ns = parser.parse_args(argv)
    env_items = load_settings()

    # Aplicar overrides via ambiente/.env SOMENTE quando o argumento
    # não foi fornecido pela linha de comando (CLI tem precedência).
    for arg, env_var in ENV_MAP.items():
        env_val = env_items.get(env_var)
        if env_val is None:
            continue
        current_val = getattr(ns, arg, None)
        if current_val is not None and current_val != parser.get_default(arg):
            continue
        try:
            if arg in _INT_ARGS:
                setattr(ns, arg, int(env_val))
            elif arg in _FLOAT_ARGS:
                setattr(ns, arg, float(env_val))
            else:
                setattr(ns, arg, env_val)
        except ValueError as exc:
            logging.getLogger(__name__).warning(
                "%s inválido ('%s'): %s. Usando valor do argumento.", env_var, env_val, exc
            )
    validate_args(ns)
    return ns


# Auxilia parse_args; criado para garantir valores corretos e seguros
def validate_args(args: argparse.Namespace) -> None:
    """Valida e normaliza argumentos do probe."""
    try:
        args.port = int(args.port)
    except (TypeError, ValueError) as exc:
        raise ValueError("porta deve ser um inteiro") from exc
    if not 0 < args.port < 65536:
        raise ValueError("porta deve estar entre 1 e 65535")

    try:
        args.interval_ms = int(args.interval_ms)
    except (TypeError, ValueError) as exc:
        raise ValueError("interval_ms deve ser um inteiro") from exc
    if args.interval_ms < 0:
        raise ValueError("interval_ms deve ser >= 0")

    try:
        args.ceiling = float(args.ceiling)
    except (TypeError, ValueError) as exc:
        raise ValueError("ceiling deve ser um número") from exc
    if args.ceiling <= 0.0:
        raise ValueError("ceiling deve ser > 0")

    try:
        args.cycles = int(args.cycles)
    except (TypeError, ValueError) as exc:
        raise ValueError("cycles deve ser um inteiro >= 0") from exc
    if args.cycles < 0:
        raise ValueError("cycles deve ser >= 0")

    if getattr(args, "timeout", None) is not None and float(args.timeout) <= 0.0:
        raise ValueError("timeout deve ser > 0")

    if getattr(args, "protocol", PROTOCOL_UDP) not in PROTOCOLS:
        raise ValueError(f"protocolo desconhecido: {args.protocol!r}")
    if getattr(args, "failure_policy", POLICY_GUARDED) not in FAILURE_POLICIES:
        raise ValueError(f"política de falha desconhecida: {args.failure_policy!r}")
    if not str(getattr(args, "metric", "") or "").strip():
        raise ValueError("nome da métrica não pode ser vazio")


# ========================
# 2. Função auxiliar para configuração de logging
# ========================


# Auxilia delayprobe.main; criado para extrair configuração de logging dos argumentos
def get_log_config(args: argparse.Namespace) -> dict:
    """Retorna dict com configuração de logging ('level' e 'root') para o probe."""
    if getattr(args, "log_level", None):
        level = str(args.log_level).upper()
    else:
        v = getattr(args, "verbose", 0) or 0
        level = "DEBUG" if v >= 2 else "INFO"

    return {"level": level, "root": getattr(args, "log_root", None)}
