# src/pipeflow/core/pipeline/store.py
"""
Store de execução do pipeflow.

Este módulo define o `Store`, o contexto mutável compartilhado entre os Steps
de uma única invocação de pipeline. Cada chamada do entry point cria um Store
novo; nada sobrevive entre invocações.

O Store atua como o único meio permitido de:
    - troca de valores entre Steps (chave → valor)
    - sinalização de erro (chave reservada `error`)
    - acesso à continuação viva do Engine (chave reservada `next`)
    - registro de eventos estruturados de execução (trace)

Invariantes:
    - Toda escrita passa por um único caminho de mutação (`_write`);
      `set`, `set_one`, `merge_many` e `seed` são apenas fachadas
    - Chaves são sempre strings
    - Eventos incluem sempre `pipeline`, `step_id`, `level` e `timestamp`

Limites explícitos:
    - Não executa Steps
    - Não decide roteamento de erros (apenas expõe `outcome()`)
    - Não persiste dados
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pipeflow.core.config.resolve import engine_option

from .types import Err, Ok, Outcome


ERROR_KEY = "error"
NEXT_KEY = "next"

_MISSING = object()


@dataclass
class Store:
    """
    Contexto mutável de uma invocação de pipeline.

    Steps recebem valores do Store como inputs e gravam seus resultados
    nele; o Engine lê o erro corrente via `outcome()`.
    """
    pipeline: str = "pipeline"
    config: Dict[str, Any] = field(default_factory=dict)

    _values: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    _seeded: int = field(default=0, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)

    # -----------------------------
    # Mutação
    # -----------------------------
    def set(self, key: Any, value: Any = None) -> None:
        """Grava um par chave/valor ou mescla um mapping inteiro."""
        if isinstance(key, Mapping):
            self.merge_many(key)
        else:
            self.set_one(key, value)

    def set_one(self, key: Any, value: Any) -> None:
        self._write({key: value})

    def merge_many(self, mapping: Mapping) -> None:
        self._write(mapping)

    def seed(self, value: Any) -> None:
        """
        Semeia o Store a partir de um pseudo-step de input.

        Um mapping é mesclado; qualquer outro valor é gravado na próxima
        chave posicional ("0", "1", ...) desta invocação.
        """
        if isinstance(value, Mapping):
            self.merge_many(value)
            return
        key = str(self._seeded)
        self._seeded += 1
        self.set_one(key, value)

    def _write(self, items: Mapping) -> None:
        for key, value in items.items():
            self._values[str(key)] = value

    # -----------------------------
    # Leitura
    # -----------------------------
    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._values

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __getitem__(self, key: str) -> Any:
        value = self._values.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    @property
    def error(self) -> Any:
        return self._values.get(ERROR_KEY)

    def outcome(self) -> Outcome:
        error = self._values.get(ERROR_KEY)
        return Err(error) if error else Ok()

    def snapshot(self) -> Dict[str, Any]:
        """Cópia rasa dos valores visíveis (sem a continuação `next`)."""
        return {k: v for k, v in self._values.items() if k != NEXT_KEY}

    # -----------------------------
    # Trace
    # -----------------------------
    @property
    def tracing(self) -> bool:
        return engine_option(self.config, "trace")

    def log(self, *, step_id: Optional[str], level: str, message: str, **extra: Any) -> None:
        if not self.tracing:
            return
        event = {
            "pipeline": self.pipeline,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)
