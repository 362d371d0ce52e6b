"""Pacote system: subsistema de logs em arquivo (feeds JSONL e debug diário)."""
