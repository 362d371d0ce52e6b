"""delayprobe: emissor periódico de uma métrica de timing sintética para statsd."""

__version__ = "0.1.0"
