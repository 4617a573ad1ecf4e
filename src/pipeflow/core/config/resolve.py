"""
Resolução da configuração efetiva do engine do pipeflow.

Toda configuração que chega ao engine (dict literal, `load_config`, ou nada)
passa por `resolve_config`, que empilha as camadas sobre `DEFAULT_CONFIG` e
valida a seção `engine`. O resultado é tratado como somente leitura por todas
as invocações do pipeline.

Política de merge:
    - mapa + mapa        → merge recursivo por chave
    - lista              → substitui o valor anterior
    - demais valores     → substituem apenas valores do mesmo tipo
    - tipos divergentes  → ConfigTypeConflictError com o caminho da chave

Nenhuma camada recebida é mutada.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from copy import deepcopy
from typing import Any, Dict, Optional, Tuple

from pipeflow.core.exceptions import ConfigTypeConflictError, InvalidEngineOptionError


DEFAULT_CONFIG: Dict[str, Any] = {
    "engine": {
        "capture_exceptions": True,
        "trace": True,
    },
}

_ABSENT = object()


def _key_path(path: Tuple[str, ...]) -> str:
    return ".".join(path) or "<root>"


def _merge_into(target: Dict[str, Any], layer: Mapping, path: Tuple[str, ...]) -> None:
    for key, value in layer.items():
        key_path = path + (str(key),)
        current = target.get(key, _ABSENT)

        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value, key_path)
            continue

        if current is not _ABSENT and not isinstance(value, list) and type(current) is not type(value):
            raise ConfigTypeConflictError(
                message=(
                    f'Config key "{_key_path(key_path)}" expects '
                    f"{type(current).__name__}, got {type(value).__name__}"
                ),
                details={
                    "key": _key_path(key_path),
                    "expected": type(current).__name__,
                    "received": type(value).__name__,
                },
            )

        target[key] = deepcopy(value)


def deep_merge(base: Mapping, override: Mapping) -> Dict[str, Any]:
    """Retorna uma cópia de `base` com `override` aplicado por cima."""
    if not isinstance(base, Mapping) or not isinstance(override, Mapping):
        raise ConfigTypeConflictError(
            message="Config layers must be mappings",
            details={
                "key": _key_path(()),
                "expected": "dict",
                "received": f"{type(base).__name__}/{type(override).__name__}",
            },
        )
    merged = deepcopy(dict(base))
    _merge_into(merged, override, ())
    return merged


def _validate_engine_section(config: Dict[str, Any]) -> None:
    known = DEFAULT_CONFIG["engine"]
    for key, value in config["engine"].items():
        if key not in known:
            raise InvalidEngineOptionError(
                message=f'Unknown engine option "engine.{key}"',
                details={"key": f"engine.{key}", "known": sorted(known)},
                hint=f"Known options: {', '.join(sorted(known))}",
            )
        if not isinstance(value, bool):
            raise InvalidEngineOptionError(
                message=f'Engine option "engine.{key}" must be true or false',
                details={"key": f"engine.{key}", "received": type(value).__name__},
            )


def resolve_config(*layers: Optional[Mapping]) -> Dict[str, Any]:
    """
    Retorna a configuração efetiva: `DEFAULT_CONFIG` + camadas, em ordem.

    Camadas `None` são ignoradas; resolver uma configuração já resolvida
    devolve uma cópia equivalente.

    Raises:
        ConfigTypeConflictError: camada com tipo incompatível (ex.: `trace: "no"`).
        InvalidEngineOptionError: opção `engine.*` desconhecida ou não booleana.
    """
    config = deepcopy(DEFAULT_CONFIG)
    for layer in layers:
        if layer is not None:
            config = deep_merge(config, layer)
    _validate_engine_section(config)
    return config


def engine_option(config: Optional[Mapping], key: str) -> bool:
    """Lê `engine.<key>` de uma configuração resolvida (ou o default)."""
    engine_cfg = (config or {}).get("engine") or {}
    return engine_cfg.get(key, DEFAULT_CONFIG["engine"][key])


def compute_config_hash(config: Mapping) -> str:
    """SHA-256 do JSON canônico da configuração, anexado a `pipeline_started`."""
    canonical = json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
