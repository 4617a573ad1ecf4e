# src/pipeflow/core/engine/executor.py
"""
Executor de Steps do pipeflow.

O executor recebe um `PipeState` já criado pelo Engine e é responsável por:
    - semear o Store (pseudo-step de input)
    - resolver os inputs declarados (Store, argumentos originais, `next`)
    - resolver a função do Step (callable ou nome no bag de dependências)
    - injetar dependências por nome de parâmetro
    - gravar o resultado conforme `output` / `output_map`
    - decidir se o retorno síncrono avança o pipeline (auto-advance)

Erros de execução (input ausente, dependência desconhecida, output
incompatível, exceções do Step) são reportados pela continuação do Step,
para que o Engine os roteie ao error handler. O próprio error handler nunca
tem erros roteados: eles propagam para quem invocou o pipeline.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pipeflow.core.config.resolve import engine_option
from pipeflow.core.exceptions import (
    MissingInputError,
    OutputMappingError,
    UnknownDependencyError,
)
from pipeflow.core.pipeline.descriptor import NEXT_INPUT
from pipeflow.core.pipeline.state import PipeState
from pipeflow.core.pipeline.store import Store
from pipeflow.core.pipeline.types import PipeKind


def _resolve_fn(fn: Any, deps: Dict[str, Any]) -> Any:
    if isinstance(fn, str):
        candidate = deps.get(fn)
        return candidate if callable(candidate) else None
    return fn


def _resolve_inputs(
    state: PipeState,
    args: Sequence[Any],
    store: Store,
) -> Tuple[List[Any], List[str]]:
    values: List[Any] = []
    missing: List[str] = []
    for name in state.input:
        if name == NEXT_INPUT:
            values.append(state.next)
        elif store.has(name):
            values.append(store.get(name))
        elif name.isdigit() and int(name) < len(args):
            values.append(args[int(name)])
        else:
            missing.append(name)
    return values, missing


def _inject_dependencies(fn: Any, positional: int, deps: Dict[str, Any]) -> Dict[str, Any]:
    """Parâmetros nomeados do Step cujo nome existe no bag de dependências."""
    if not deps:
        return {}
    try:
        params = inspect.signature(fn).parameters
    except (TypeError, ValueError):
        return {}

    kwargs: Dict[str, Any] = {}
    for position, (name, param) in enumerate(params.items()):
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD, param.POSITIONAL_ONLY):
            continue
        if param.kind is param.POSITIONAL_OR_KEYWORD and position < positional:
            continue
        if name in deps:
            kwargs[name] = deps[name]
    return kwargs


def map_output(state: PipeState, result: Any) -> Optional[Dict[str, Any]]:
    """
    Converte o resultado de um Step no mapping a gravar no Store.

    Retorna None quando o Step não declara output.

    Raises:
        OutputMappingError: resultado incompatível com o output declarado.
    """
    if state.not_:
        result = not result

    if state.output_map is not None:
        if not isinstance(result, Mapping):
            raise OutputMappingError(
                message=f'Step "{state.label}" must return a mapping for its output map',
                details={"step": state.label, "received": type(result).__name__},
            )
        absent = [k for k in state.output_map if k not in result]
        if absent:
            raise OutputMappingError(
                message=f'Step "{state.label}" result is missing keys: {", ".join(absent)}',
                details={"step": state.label, "missing": absent},
            )
        return {store_key: result[key] for key, store_key in state.output_map.items()}

    if not state.output:
        return None

    if len(state.output) == 1:
        return {state.output[0]: result}

    if not isinstance(result, (list, tuple)) or len(result) != len(state.output):
        raise OutputMappingError(
            message=(
                f'Step "{state.label}" must return {len(state.output)} values '
                f"for outputs {list(state.output)}"
            ),
            details={"step": state.label, "outputs": list(state.output)},
        )
    return dict(zip(state.output, result))


def execute_pipe(
    err: Any,
    args: Sequence[Any],
    deps: Dict[str, Any],
    store: Store,
    state: PipeState,
) -> None:
    """
    Executa um único Step e, quando aplicável, avança o pipeline.

    Args:
        err: erro corrente (apenas para o error handler).
        args: argumentos originais da invocação do pipeline.
        deps: bag de dependências do pipeline.
        store: Store da invocação.
        state: estado de execução deste Step.
    """
    if state.kind is PipeKind.INPUT:
        store.seed(state.fn)
        state.next()
        return

    is_handler = state.kind is PipeKind.ERROR

    fn = _resolve_fn(state.fn, deps)
    if fn is None:
        error = UnknownDependencyError(
            message=f'Unknown dependency "{state.fn}" for step "{state.label}"',
            details={"step": state.label, "dependency": state.fn},
        )
        if is_handler:
            raise error
        state.next(error)
        return

    values, missing = _resolve_inputs(state, args, store)
    if missing:
        if state.optional:
            store.log(
                step_id=state.label,
                level="INFO",
                message="step_skipped",
                step_index=state.index,
                missing=missing,
            )
            state.next()
            return
        error = MissingInputError(
            message=f'Step "{state.label}" is missing inputs: {", ".join(missing)}',
            details={"step": state.label, "missing": missing},
            hint="Seed the value with .input(...) or mark the step optional",
        )
        if is_handler:
            raise error
        state.next(error)
        return

    if is_handler and not state.input:
        values = [err]

    kwargs = _inject_dependencies(fn, len(values), deps)

    try:
        result = fn(*values, **kwargs)
    except Exception as exc:
        # Exceptions raised after completion come from downstream steps.
        if is_handler or state.completed or not engine_option(store.config, "capture_exceptions"):
            raise
        state.next(exc)
        return

    state.result = result
    state.fn_returned = True

    if not state.auto_next or state.completed:
        return

    try:
        mapped = map_output(state, result)
    except OutputMappingError as exc:
        if is_handler:
            raise
        state.next(exc)
        return

    if mapped is None:
        state.next()
    else:
        state.next(None, mapped)
