# src/pipeflow/core/engine/engine.py
"""
Engine de execução do pipeflow.

O Engine é um interpretador por continuação: em vez de um laço, cada Step
sinaliza sua conclusão chamando a continuação (`next`), diretamente ou via
auto-advance, e é essa chamada que dispara o Step seguinte. Isso permite que
Steps concluam de forma síncrona (dentro da própria chamada) ou adiada
(arbitrariamente depois).

Contrato de `next(err=None, *result)`:
    1. Se existe um Step anterior e a chamada carrega resultado, o Step
       anterior é marcado como concluído e o resultado é mesclado no Store.
    2. O erro efetivo é `err` quando informado; senão, o erro gravado no Store.
    3. Com erro: o controle vai para o error handler; sem handler, falha fatal.
    4. Sem erro: o próximo descritor da lista é executado.
    5. Sem descritor: a invocação termina silenciosamente.

Invariantes:
    - Cada invocação possui seu próprio Store e sua própria continuação
    - Depois que o error handler é despachado a invocação é um beco sem saída:
      novas chamadas a `next` apenas mesclam resultados
    - Apenas o caso "erro sem handler" vira exceção Python; um erro reportado
      pelo próprio error handler também é fatal
    - A continuação aceita `next(err)`, `next(err, key, value)` ou
      `next(err, mapping)`; outras formas viram OutputMappingError do Step

Limites explícitos:
    - Não há retry, timeout, cancelamento nem detecção de Steps que nunca
      chamam a continuação
    - Não há execução paralela de Steps
    - Não há trampolim: cada Step concluído de forma síncrona empilha alguns
      frames (Engine → executor → continuação) sobre o anterior. Pipelines
      síncronos com algumas centenas de Steps podem esgotar o limite de
      recursão do Python (`sys.getrecursionlimit()`, 1000 por padrão) e
      levantar RecursionError; Steps adiados reiniciam a pilha
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Optional, Sequence, Tuple

from pipeflow.core.config.resolve import compute_config_hash, resolve_config
from pipeflow.core.errors import error_to_payload, unhandled_step_error
from pipeflow.core.exceptions import OutputMappingError, UnhandledStepError
from pipeflow.core.pipeline.descriptor import PipeDescriptor
from pipeflow.core.pipeline.state import PipeState
from pipeflow.core.pipeline.store import ERROR_KEY, NEXT_KEY, Store
from pipeflow.core.pipeline.types import Err, PipeKind

from .executor import execute_pipe


def _result_shape_error(state: PipeState, result: Tuple[Any, ...]) -> Optional[OutputMappingError]:
    if len(result) == 2 or (len(result) == 1 and isinstance(result[0], Mapping)):
        return None
    return OutputMappingError(
        message=(
            f'Step "{state.label}" completed with {len(result)} result values; '
            "expected (key, value) or (mapping,)"
        ),
        details={"step": state.label, "received": len(result)},
    )


class PipelineExecution:
    """Uma invocação de pipeline: Store, índice do Step e roteamento de erro."""

    def __init__(
        self,
        *,
        name: str,
        pipes: Sequence[PipeDescriptor],
        args: Sequence[Any],
        deps: Dict[str, Any],
        error_handler: Optional[PipeDescriptor],
        config: Dict[str, Any],
    ):
        self.name = name
        self.pipes = pipes
        self.args = tuple(args)
        self.deps = deps
        self.error_handler = error_handler
        self.config = config

        self.store = Store(pipeline=name, config=config)
        self.step = 0
        self.previous: Optional[PipeState] = None
        self._dead_end = False
        self._finished = False

    def start(self) -> Store:
        self.store.set_one(NEXT_KEY, self.next)
        self.store.log(
            step_id=None,
            level="INFO",
            message="pipeline_started",
            args=len(self.args),
            steps=len(self.pipes),
            config_hash=compute_config_hash(self.config),
        )
        self.next()
        return self.store

    def next(self, err: Any = None, *result: Any) -> None:
        previous = self.previous

        if previous is not None and result:
            # The step may still be inside its own call; completing it here
            # prevents a later auto-advance from applying its result again.
            previous.complete()
            shape_error = _result_shape_error(previous, result)
            if shape_error is None:
                self.store.set(*result)
            elif not err:
                err = shape_error

        if self._dead_end:
            if err:
                self.store.set_one(ERROR_KEY, err)
                self._raise_unhandled(err, index=previous.index, label=previous.label)
            return

        if err:
            self.store.set_one(ERROR_KEY, err)
        outcome = self.store.outcome()

        if isinstance(outcome, Err):
            self._trace_step_end(previous, failed=True)
            pipe = self._route_error(outcome.error)
            index = self.step - 1
            self._dead_end = True
        else:
            self._trace_step_end(previous, failed=False)
            if self.step >= len(self.pipes):
                self._finish()
                return
            pipe = self.pipes[self.step]
            index = self.step
            self.step += 1

        state = PipeState.from_descriptor(pipe, index=index, continuation=self.next)
        self.previous = state

        if state.kind is not PipeKind.INPUT:
            self.store.log(
                step_id=state.label,
                level="INFO",
                message="step_started",
                step_index=index,
                kind=state.kind.value,
            )

        execute_pipe(
            outcome.error if isinstance(outcome, Err) else None,
            self.args,
            self.deps,
            self.store,
            state,
        )

    # ------------------------------------------------------------------
    # Erros
    # ------------------------------------------------------------------

    def _failing_label(self) -> str:
        return self.previous.label if self.previous is not None else "function"

    def _route_error(self, error: Any) -> PipeDescriptor:
        label = self._failing_label()
        index = max(self.step - 1, 0)

        if self.error_handler is None:
            self._raise_unhandled(error, index=index, label=label)

        self.store.log(
            step_id=label,
            level="ERROR",
            message="error_routed",
            step_index=index,
            error=error_to_payload(error, step=label).to_dict(),
        )
        return self.error_handler

    def _raise_unhandled(self, error: Any, *, index: int, label: str) -> None:
        self.store.log(
            step_id=label,
            level="ERROR",
            message="error_unhandled",
            step_index=index,
            error=error_to_payload(error, step=label).to_dict(),
        )

        if isinstance(error, BaseException):
            raise error

        payload = unhandled_step_error(
            pipeline=self.name,
            step_index=index,
            step=label,
            error=error,
        )
        raise UnhandledStepError(
            message=payload.message,
            details=payload.details,
            hint=payload.hint,
        )

    # ------------------------------------------------------------------
    # Trace
    # ------------------------------------------------------------------

    def _trace_step_end(self, state: Optional[PipeState], *, failed: bool) -> None:
        if state is None or state.kind is PipeKind.INPUT:
            return
        self.store.log(
            step_id=state.label,
            level="ERROR" if failed else "INFO",
            message="step_failed" if failed else "step_completed",
            step_index=state.index,
        )

    def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        self.store.log(
            step_id=None,
            level="INFO",
            message="pipeline_finished",
            steps=self.step,
        )


def exec_pipeline(
    name: str,
    pipes: Sequence[PipeDescriptor],
    args: Sequence[Any],
    deps: Optional[Dict[str, Any]] = None,
    error_handler: Optional[PipeDescriptor] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Store:
    """
    Executa uma invocação do pipeline e retorna o Store da invocação.

    Quando algum Step conclui de forma adiada, o Store retornado reflete
    apenas o que já foi executado até o retorno desta função.

    Raises:
        UnhandledStepError: erro (não-exceção) reportado sem error handler.
        ConfigError: `config` inválida (tipos ou opções `engine.*`).
        Exception: a própria exceção reportada, quando não há error handler.
    """
    execution = PipelineExecution(
        name=name,
        pipes=pipes,
        args=args,
        deps=deps or {},
        error_handler=error_handler,
        config=resolve_config(config),
    )
    return execution.start()
