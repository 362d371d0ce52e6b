"""Pacote exporter: exposição local das emissões para scraping Prometheus.

Oferece re-exports como ``from delayprobe.exporter import start_exporter``.
"""

from .prometheus import start_exporter, observe_emission  # re-export

__all__ = ["start_exporter", "observe_emission"]
