# src/pipeflow/core/pipeline/descriptor.py
"""
Descritor canônico de pipe do pipeflow.

Este módulo transforma a definição bruta de um Step (`fn`, `input`, `output`)
em um `PipeDescriptor` normalizado e imutável, criado uma única vez no momento
da definição do pipeline e compartilhado por todas as invocações.

Formas aceitas por `create_pipe`:
    - create_pipe(fn, input, output)                → Step normal
    - create_pipe(PipeKind.PIPE, fn, input, output) → Step normal (forma declarativa)
    - create_pipe(PipeKind.INPUT, value)            → pseudo-step de input
    - create_pipe(PipeKind.ERROR, fn, input)        → error handler

Normalização:
    - `fn` pode ser um callable ou o nome de uma função do bag de dependências;
      o prefixo "!" no nome inverte o resultado booleano (`not_`)
    - `input` aceita None, uma chave ou uma sequência de chaves
    - `output` aceita None, uma chave, uma sequência de chaves
      (resultado distribuído posicionalmente) ou um dict
      `{chave_do_resultado: chave_do_store}` (`output_map`)
    - declarar o input reservado "next" desliga o auto-advance

Limites explícitos:
    - Não executa Steps
    - Não resolve nomes de dependências (isso ocorre na execução)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from pipeflow.core.exceptions import PipelineConfigurationError

from .types import PipeKind


NEXT_INPUT = "next"
NOT_PREFIX = "!"


@dataclass(frozen=True)
class PipeDescriptor:
    """
    Representação normalizada de um Step.

    Campos:
        - kind: PIPE, INPUT ou ERROR
        - fn: callable, nome de dependência, ou o valor literal (INPUT)
        - fn_name: rótulo opcional para diagnósticos
        - input: chaves do store / índices de argumentos ("0", "1", ...)
        - output: chaves do store que recebem o resultado
        - output_map: mapeamento {chave_do_resultado: chave_do_store}
        - not_: inverte o resultado antes de gravar
        - optional: Step é pulado quando um input declarado está ausente
        - auto_next: retorno síncrono avança o pipeline automaticamente

    `output_map` é tratado como somente leitura após a criação.
    """
    kind: PipeKind
    fn: Any
    fn_name: Optional[str] = None
    input: Tuple[str, ...] = ()
    output: Optional[Tuple[str, ...]] = None
    output_map: Optional[Dict[str, str]] = None
    not_: bool = False
    optional: bool = False
    auto_next: bool = True

    @property
    def label(self) -> str:
        return step_label(self.fn_name, self.fn)


def step_label(fn_name: Optional[str], fn: Any) -> str:
    """Rótulo de diagnóstico: `fn_name`, senão `fn.__name__`, senão "function"."""
    if fn_name:
        return fn_name
    if isinstance(fn, str) and fn:
        return fn
    return getattr(fn, "__name__", None) or "function"


def as_kind(value: Any) -> Optional[PipeKind]:
    if isinstance(value, PipeKind):
        return value
    if isinstance(value, str):
        try:
            return PipeKind(value)
        except ValueError:
            return None
    return None


def _normalize_keys(value: Any, *, field_name: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise PipelineConfigurationError(
        message=f"Invalid pipe {field_name}: expected str or list of str",
        details={"field": field_name, "received": type(value).__name__},
    )


def _normalize_output(value: Any) -> Tuple[Optional[Tuple[str, ...]], Optional[Dict[str, str]]]:
    if isinstance(value, dict):
        if not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
            raise PipelineConfigurationError(
                message="Invalid pipe output map: keys and values must be str",
                details={"field": "output"},
            )
        return None, dict(value)
    keys = _normalize_keys(value, field_name="output")
    return (keys or None), None


def _normalize_fn(fn: Any) -> Tuple[Any, bool]:
    if isinstance(fn, str):
        negate = fn.startswith(NOT_PREFIX)
        name = fn[len(NOT_PREFIX):] if negate else fn
        if not name:
            raise PipelineConfigurationError(
                message="Pipe function name must be a non-empty string",
                details={"received": fn},
            )
        return name, negate
    if callable(fn):
        return fn, False
    raise PipelineConfigurationError(
        message="Pipe function must be callable or a dependency name",
        details={"received": type(fn).__name__},
    )


def create_pipe(
    kind_or_fn: Any,
    *args: Any,
    optional: bool = False,
    auto_next: Optional[bool] = None,
    fn_name: Optional[str] = None,
    not_: bool = False,
) -> PipeDescriptor:
    """
    Cria um `PipeDescriptor` normalizado.

    Args:
        kind_or_fn: `PipeKind` (ou seu valor textual) ou a própria função do Step.
        *args: `(value,)` para INPUT; `(fn, input, output)` para PIPE/ERROR
            na forma com kind; `(input, output)` quando `kind_or_fn` é a função.
        optional: pula o Step quando um input declarado está ausente.
        auto_next: força o modo de avanço; por padrão é automático, exceto
            quando "next" é declarado como input.
        fn_name: rótulo para diagnósticos.
        not_: inverte o resultado booleano do Step.

    Raises:
        PipelineConfigurationError: definição estruturalmente inválida.
    """
    kind = as_kind(kind_or_fn)

    if kind is PipeKind.INPUT:
        if len(args) > 1:
            raise PipelineConfigurationError(
                message="Input pipe accepts a single value",
                details={"received_args": len(args)},
            )
        return PipeDescriptor(
            kind=PipeKind.INPUT,
            fn=args[0] if args else None,
            fn_name=fn_name or "input",
        )

    if kind is None:
        kind, fn, rest = PipeKind.PIPE, kind_or_fn, args
    elif not args:
        raise PipelineConfigurationError(
            message=f"Missing function for {kind.value} pipe",
            details={"kind": kind.value},
        )
    else:
        fn, rest = args[0], args[1:]

    if len(rest) > 2:
        raise PipelineConfigurationError(
            message="Pipe accepts at most (fn, input, output)",
            details={"received_args": len(args)},
        )

    fn, negate = _normalize_fn(fn)
    inputs = _normalize_keys(rest[0] if rest else None, field_name="input")
    output, output_map = _normalize_output(rest[1] if len(rest) > 1 else None)

    if auto_next is None:
        auto_next = NEXT_INPUT not in inputs

    return PipeDescriptor(
        kind=kind,
        fn=fn,
        fn_name=fn_name,
        input=inputs,
        output=output,
        output_map=output_map,
        not_=bool(not_ or negate),
        optional=bool(optional),
        auto_next=bool(auto_next),
    )
