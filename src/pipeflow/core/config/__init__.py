"""
Camada de configuração do pipeflow.

A configuração de um pipeline é um dicionário puro, resolvido uma única vez
no momento da definição do pipeline e compartilhado (somente leitura) por
todas as invocações.

Chaves reconhecidas (v1):
    - engine.capture_exceptions → exceções de Steps viram erros roteáveis
    - engine.trace              → emissão de eventos estruturados no Store

Outras seções de topo são preservadas sem validação, para uso da aplicação.
"""

from .loader import load_config, read_config_file
from .resolve import (
    DEFAULT_CONFIG,
    compute_config_hash,
    deep_merge,
    engine_option,
    resolve_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "compute_config_hash",
    "deep_merge",
    "engine_option",
    "load_config",
    "read_config_file",
    "resolve_config",
]
