"""
Loader de configuração do pipeflow.

Lê arquivos de configuração (YAML ou JSON) e devolve a configuração efetiva
do engine, já resolvida sobre os defaults embutidos:

    DEFAULT_CONFIG  <  defaults_path  <  local_path (opcional)

O resultado pode ser passado diretamente como `config` para
`create_pipeline` ou `exec_pipeline`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import yaml  # PyYAML

from pipeflow.core.exceptions import (
    ConfigFileNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)

from .resolve import resolve_config


PathLike = Union[str, Path]

_PARSERS: Dict[str, Callable[[Any], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def read_config_file(path: PathLike) -> Dict[str, Any]:
    """
    Lê um único arquivo de configuração. Arquivos vazios valem `{}`.

    Raises:
        UnsupportedConfigFormatError: extensão sem parser.
        ConfigFileNotFoundError: arquivo inexistente.
        InvalidConfigRootTypeError: raiz diferente de um mapa.
    """
    path = Path(path)
    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise UnsupportedConfigFormatError(
            message=f"Unsupported config format: {path.suffix or path.name}",
            details={"path": str(path), "supported": sorted(_PARSERS)},
        )
    if not path.is_file():
        raise ConfigFileNotFoundError(
            message=f"Config file not found: {path}",
            details={"path": str(path)},
        )

    with path.open("r", encoding="utf-8") as f:
        data = parser(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            message=f"Config root must be a mapping, got {type(data).__name__}",
            details={"path": str(path), "received": type(data).__name__},
        )
    return data


def load_config(
    *,
    defaults_path: PathLike,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Carrega a configuração efetiva de um pipeline.

    `defaults_path` é obrigatório; `local_path` é ignorado quando o arquivo
    não existe.

    Raises:
        ConfigError: qualquer falha de leitura, merge ou validação.
    """
    layers = [read_config_file(defaults_path)]
    if local_path is not None and Path(local_path).is_file():
        layers.append(read_config_file(local_path))
    return resolve_config(*layers)
