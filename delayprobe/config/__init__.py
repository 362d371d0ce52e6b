"""Pacote config: constantes e carregamento de configurações do probe."""
