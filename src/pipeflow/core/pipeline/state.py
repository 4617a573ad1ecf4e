# src/pipeflow/core/pipeline/state.py
"""
Estado de execução de um Step (PipeState).

Um `PipeState` é criado imediatamente antes de cada Step executar, pertence
exclusivamente àquela invocação do Step e é substituído quando o Engine avança.

A continuação exposta ao Step (`PipeState.next`) é protegida pela transição
`PENDING → COMPLETED`: apenas a primeira conclusão é repassada ao Engine.
Isso neutraliza a "conclusão dupla" de um Step que chama a continuação e
também retorna um valor com auto-advance ligado (em qualquer ordem).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from .descriptor import PipeDescriptor, step_label
from .types import PipeKind, StepState


@dataclass(eq=False)
class PipeState:
    kind: PipeKind
    fn: Any
    fn_name: Optional[str]
    input: Tuple[str, ...]
    output: Optional[Tuple[str, ...]]
    output_map: Optional[Dict[str, str]]
    not_: bool
    optional: bool
    auto_next: bool
    index: int
    result: Any = None
    fn_returned: bool = False
    status: StepState = StepState.PENDING

    _continuation: Optional[Callable[..., None]] = field(default=None, repr=False)

    @classmethod
    def from_descriptor(
        cls,
        pipe: PipeDescriptor,
        *,
        index: int,
        continuation: Callable[..., None],
    ) -> "PipeState":
        return cls(
            kind=pipe.kind,
            fn=pipe.fn,
            fn_name=pipe.fn_name,
            input=pipe.input,
            output=pipe.output,
            output_map=pipe.output_map,
            not_=pipe.not_,
            optional=pipe.optional,
            auto_next=pipe.auto_next,
            index=index,
            _continuation=continuation,
        )

    @property
    def label(self) -> str:
        return step_label(self.fn_name, self.fn)

    @property
    def completed(self) -> bool:
        return self.status is StepState.COMPLETED

    def complete(self) -> bool:
        """Transição PENDING → COMPLETED. Retorna False se já estava concluído."""
        if self.status is StepState.COMPLETED:
            return False
        self.status = StepState.COMPLETED
        return True

    def next(self, err: Any = None, *result: Any) -> None:
        """
        Continuação entregue ao Step.

        Aceita `next(err)`, `next(err, key, value)` ou `next(err, mapping)`.
        Chamadas após a primeira conclusão são ignoradas.
        """
        if not self.complete():
            return
        if self._continuation is not None:
            self._continuation(err, *result)
