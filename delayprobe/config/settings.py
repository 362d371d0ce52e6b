"""Configurações do probe de delay.

Este módulo centraliza as constantes do probe (endpoint statsd, nome da
métrica, intervalo fixo e teto das amostras) e permite overrides via arquivo
``.env`` ou variáveis de ambiente (prefixo ``DELAYPROBE_*``).
As funções públicas principais são:

- ``load_settings()`` -> dicionário com os valores efetivos vindos de
  ``.env`` + ambiente (apenas chaves ``DELAYPROBE_*``).
- ``ProbeSettings.from_namespace()`` -> configuração imutável consumida pelo
  loop de emissão.

Comentários e mensagens de log estão em português.
"""

import os
from dataclasses import dataclass
from pathlib import Path


# ========================
# Constantes e padrões globais
# ========================

ENV_PREFIX = "DELAYPROBE_"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8125
METRIC_NAME = "test.core.delay"
# intervalo fixo entre emissões; não é aleatório
DELAY_MS = 3000
SAMPLE_CEILING = 1000.0

STARTUP_MARKER = "🚀🚀🚀"

PROTOCOL_UDP = "udp"
PROTOCOL_TCP = "tcp"
PROTOCOLS = (PROTOCOL_UDP, PROTOCOL_TCP)

POLICY_GUARDED = "guarded"
POLICY_PROPAGATE = "propagate"
FAILURE_POLICIES = (POLICY_GUARDED, POLICY_PROPAGATE)


# ========================
# 1. Carregamento das configurações
# ========================


# Função principal do módulo; carrega overrides do .env e do ambiente
def load_settings() -> dict:
    """Carrega configurações combinando ``.env`` + ambiente.

    Retorna apenas as chaves com prefixo ``DELAYPROBE_``. As variáveis do
    processo sobrescrevem valores do arquivo ``.env``; o caminho do arquivo
    pode ser definido por ``DELAYPROBE_ENV_FILE``.
    """
    import logging

    logger = logging.getLogger(__name__)

    project_root = Path(__file__).resolve().parents[2]
    env_path = Path(os.getenv("DELAYPROBE_ENV_FILE", project_root / ".env"))

    env_items = _merge_env_items(env_path, logger)
    return {k: v for k, v in env_items.items() if k.startswith(ENV_PREFIX)}


# ========================
# 2. Funções auxiliares para ambiente e overrides
# ========================


# Auxilia load_settings; criado para centralizar leitura do .env
def _read_env_file(path: Path | str) -> dict:
    """Lê um arquivo `.env` e devolve um dicionário chave->valor.

    Linhas vazias e comentários (começando com '#') são ignorados.
    """
    import logging

    logger = logging.getLogger(__name__)
    result: dict[str, str] = {}
    p = Path(path)
    if not p.exists():
        return result
    try:
        with p.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, val = line.split("=", 1)
                result[key.strip()] = val.strip().strip('"').strip("'")
    except OSError as exc:
        logger.debug("Falha ao ler .env em %s: %s", p, exc)
        return {}
    return result


# Auxilia load_settings; criado para unir variáveis do ambiente e .env
def _merge_env_items(env_path: Path, logger) -> dict:
    """Retorna um mapeamento combinado de `.env` e env vars do processo.

    As variáveis do processo sobrescrevem o arquivo `.env`.
    """
    env_items = _read_env_file(env_path)
    if env_items == {} and env_path.exists():
        logger.warning("Erro ou ficheiro .env vazio em %s", env_path)
    env_items.update(os.environ)
    return env_items


# ========================
# 3. Configuração efetiva do probe
# ========================


@dataclass(frozen=True)
# Configuração imutável do probe; consumida por core.run_loop e core.client
class ProbeSettings:
    """Agrupa endpoint, identidade da métrica e política de falhas.

    Fixada no arranque e mantida durante toda a vida do processo.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    protocol: str = PROTOCOL_UDP
    prefix: str | None = None
    metric_name: str = METRIC_NAME
    interval_ms: int = DELAY_MS
    sample_ceiling: float = SAMPLE_CEILING
    failure_policy: str = POLICY_GUARDED
    cycles: int = 0
    timeout: float | None = None
    verbose: int = 0

    @property
    def interval_seconds(self) -> float:
        """Intervalo entre emissões em segundos (para asyncio.sleep)."""
        return self.interval_ms / 1000.0

    @property
    def guarded(self) -> bool:
        return self.failure_policy == POLICY_GUARDED

    @classmethod
    def from_namespace(cls, ns) -> "ProbeSettings":
        """Constrói a configuração a partir do Namespace de `core.args.parse_args`."""
        return cls(
            host=ns.host,
            port=int(ns.port),
            protocol=ns.protocol,
            prefix=ns.prefix or None,
            metric_name=ns.metric,
            interval_ms=int(ns.interval_ms),
            sample_ceiling=float(ns.ceiling),
            failure_policy=ns.failure_policy,
            cycles=int(ns.cycles),
            timeout=ns.timeout,
            verbose=int(getattr(ns, "verbose", 0) or 0),
        )
