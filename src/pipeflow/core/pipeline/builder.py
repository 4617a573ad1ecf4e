# src/pipeflow/core/pipeline/builder.py
"""
Builder de pipelines do pipeflow.

Este módulo acumula a lista ordenada de descritores e, no máximo, um error
handler, produzindo o entry point que dispara cada invocação.

Duas formas de construção, mutuamente exclusivas por instância:
    - fluente:     create_pipeline("nome").input(...).pipe(...).error(...).end()
    - declarativa: create_pipeline("nome", [[kind_or_fn, ...], ...], deps)
      (o `end()` é chamado automaticamente e o entry point é retornado)

Invariantes:
    - Zero ou um error handler por pipeline, em qualquer das formas
    - Após `end()` o builder fica congelado
    - Descritores, dependências e configuração são compartilhados entre
      invocações e tratados como somente leitura
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pipeflow.core.config.resolve import resolve_config
from pipeflow.core.engine.engine import exec_pipeline
from pipeflow.core.exceptions import PipelineConfigurationError

from .descriptor import PipeDescriptor, as_kind, create_pipe
from .types import PipeKind


def only_one_error_handler_is_allowed(error_handler: Optional[PipeDescriptor]) -> None:
    if error_handler is not None:
        raise PipelineConfigurationError(
            message="Each pipeline could only have one error handler.",
            details={"error_handler": error_handler.label},
        )


def create_pipes(
    defs: Optional[Iterable[Any]],
) -> Tuple[List[PipeDescriptor], Optional[PipeDescriptor]]:
    """Converte a forma declarativa em (lista de pipes, error handler)."""
    pipes: List[PipeDescriptor] = []
    error_handler: Optional[PipeDescriptor] = None

    for pipe_def in defs or []:
        if not isinstance(pipe_def, (list, tuple)) or not pipe_def:
            raise PipelineConfigurationError(
                message="Pipe definition must be a non-empty list",
                details={"received": repr(pipe_def)},
            )
        pipe = create_pipe(*pipe_def)
        if as_kind(pipe_def[0]) is PipeKind.ERROR:
            only_one_error_handler_is_allowed(error_handler)
            error_handler = pipe
        else:
            pipes.append(pipe)

    return pipes, error_handler


class Pipeline:
    """Builder fluente de um pipeline nomeado."""

    def __init__(
        self,
        name: str,
        defs: Optional[Iterable[Any]] = None,
        deps: Optional[Dict[str, Any]] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        self.name = name
        self.deps: Dict[str, Any] = dict(deps or {})
        self.config: Dict[str, Any] = resolve_config(config)
        self._pipes, self._error_handler = create_pipes(defs)
        self._frozen = False

    @property
    def pipes(self) -> Tuple[PipeDescriptor, ...]:
        return tuple(self._pipes)

    @property
    def error_handler(self) -> Optional[PipeDescriptor]:
        return self._error_handler

    def _ensure_open(self) -> None:
        if self._frozen:
            raise PipelineConfigurationError(
                message=f'Pipeline "{self.name}" was already ended',
                details={"pipeline": self.name},
            )

    def input(self, value: Any) -> "Pipeline":
        self._ensure_open()
        self._pipes.append(create_pipe(PipeKind.INPUT, value))
        return self

    def pipe(self, fn: Any, input: Any = None, output: Any = None, **options: Any) -> "Pipeline":
        kind = as_kind(fn)
        if kind is PipeKind.ERROR:
            return self.error(input, output)
        if kind is PipeKind.INPUT:
            return self.input(input)

        self._ensure_open()
        self._pipes.append(create_pipe(fn, input, output, **options))
        return self

    def error(self, fn: Any, input: Any = None, output: Any = None) -> "Pipeline":
        """Registra o error handler, ex.: `.error(handle, ["error"])`."""
        self._ensure_open()
        only_one_error_handler_is_allowed(self._error_handler)
        self._error_handler = create_pipe(PipeKind.ERROR, fn, input, output)
        return self

    def end(self) -> Callable[..., None]:
        self._frozen = True

        name = self.name
        pipes = tuple(self._pipes)
        error_handler = self._error_handler
        deps = self.deps
        config = self.config

        def run_pipeline(*args: Any) -> None:
            exec_pipeline(name, pipes, args, deps, error_handler, config)

        run_pipeline.__qualname__ = f"Pipeline[{name}]"
        return run_pipeline


def create_pipeline(
    name: str,
    defs: Optional[Iterable[Any]] = None,
    deps: Optional[Dict[str, Any]] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Cria um pipeline.

    Sem `defs`, retorna o builder fluente (`Pipeline`). Com `defs`, retorna
    diretamente o entry point.

    Raises:
        PipelineConfigurationError: mais de um error handler, ou definição inválida.
    """
    pipeline = Pipeline(name, defs, deps, config)
    if defs is not None:
        return pipeline.end()
    return pipeline
