# src/pipeflow/core/pipeline/types.py
"""
Tipos canônicos do pipeline do pipeflow.

Componentes principais:
    - PipeKind  → tipo de descritor (step normal, input, error handler)
    - StepState → máquina de estados de uma invocação de Step
    - Ok / Err  → resultado discriminado sobre o qual o Engine roteia erros

Invariantes:
    - Enums possuem valores textuais canônicos
    - Ok/Err são imutáveis
    - Nenhuma lógica de execução vive neste módulo
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class PipeKind(str, Enum):
    """
    Tipos de descritores de pipe.

    Tipos definidos:
        - PIPE: Step normal, executado na ordem da lista
        - INPUT: pseudo-step que apenas semeia o store
        - ERROR: error handler, guardado fora da lista ordenada

    Os valores textuais ("pipe", "input", "error") também são aceitos
    na forma declarativa do pipeline.
    """
    PIPE = "pipe"
    INPUT = "input"
    ERROR = "error"


class StepState(str, Enum):
    """
    Estado de uma invocação de Step.

    Transição única: PENDING → COMPLETED. Qualquer tentativa de transição
    a partir de COMPLETED é ignorada (no-op).
    """
    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Ok:
    """Ausência de erro no store."""
    value: Any = None


@dataclass(frozen=True)
class Err:
    """Erro corrente (ainda não tratado) de uma invocação."""
    error: Any


Outcome = Union[Ok, Err]
