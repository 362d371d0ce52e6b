"""Pacote core: orquestração principal do probe.

Contém o loop de emissão, o supervisor, o cliente statsd e o parsing de
argumentos.
"""

from .emitter import record_emission
from .core import run_loop, supervise

__all__ = ["record_emission", "run_loop", "supervise"]
