"""Cliente de métricas usado pelo loop de emissão.

Encapsula um cliente da biblioteca ``statsd`` construído explicitamente a
partir de ``ProbeSettings`` (sem instância global de módulo) e converte
falhas de transporte em ``TransmissionError``.
"""

import logging

from statsd import StatsClient, TCPStatsClient
from statsd.client.stream import StreamClientBase

from ..config.settings import PROTOCOL_TCP

logger = logging.getLogger(__name__)


class DelayProbeError(Exception):
    """Erro base do probe."""


class TransmissionError(DelayProbeError):
    """Falha de transporte ao enviar uma medição para o daemon statsd."""


class _StrictStatsClient(StatsClient):
    """StatsClient UDP cujo envio não descarta erros de socket.

    O ``StatsClient`` original ignora ``socket.error`` em ``_send``; aqui o
    erro sobe para que a política de falhas do loop possa decidir.
    """

    def _send(self, data):
        self._sock.sendto(data.encode("ascii"), self._addr)


class MetricsClient:
    """Cliente statsd reutilizado entre iterações do loop.

    ``backend`` é qualquer objeto com ``timing(stat, delta)`` e ``close()``
    (``statsd.StatsClient`` / ``statsd.TCPStatsClient`` em produção, um fake
    nos testes).
    """

    def __init__(self, backend, host: str, port: int):
        self._backend = backend
        self.host = host
        self.port = port

    @property
    def endpoint(self) -> tuple[str, int]:
        return self.host, self.port

    def timing(self, name: str, value: float) -> None:
        """Envia uma medição de timing (ms); levanta TransmissionError em falha de transporte."""
        try:
            self._backend.timing(name, value)
        except OSError as exc:
            if isinstance(self._backend, StreamClientBase):
                # descarta o socket morto; o próximo envio reconecta
                self.close()
            raise TransmissionError(f"falha ao enviar {name} para {self.host}:{self.port}: {exc}") from exc

    def close(self) -> None:
        try:
            self._backend.close()
        except OSError as exc:
            logger.debug("close: falha ao fechar socket statsd: %s", exc, exc_info=True)


# Função principal do módulo; cria o cliente a partir da configuração
def build_client(settings) -> MetricsClient:
    """Constrói o cliente statsd para o endpoint configurado.

    A resolução do endereço (UDP) acontece aqui; erros de DNS/socket são
    convertidos em ``TransmissionError``.
    """
    try:
        if settings.protocol == PROTOCOL_TCP:
            backend = TCPStatsClient(
                host=settings.host,
                port=settings.port,
                prefix=settings.prefix,
                timeout=settings.timeout,
            )
        else:
            backend = _StrictStatsClient(host=settings.host, port=settings.port, prefix=settings.prefix)
    except OSError as exc:
        raise TransmissionError(
            f"falha ao preparar cliente statsd {settings.protocol}://{settings.host}:{settings.port}: {exc}"
        ) from exc
    logger.debug("cliente statsd %s pronto para %s:%d", settings.protocol, settings.host, settings.port)
    return MetricsClient(backend, settings.host, settings.port)
