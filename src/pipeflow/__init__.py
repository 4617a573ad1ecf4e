# src/pipeflow/__init__.py
"""
pipeflow — engine sequencial de Steps orientado a continuações.

Um pipeline é uma lista ordenada de Steps ("pipes") executados um de cada vez,
compartilhando um Store chave/valor por invocação. Cada Step pode concluir de
forma síncrona (retorno com auto-advance) ou adiada (chamando a continuação
`next` mais tarde), e um único error handler opcional recebe o controle quando
qualquer Step reporta erro.

Arquitetura em alto nível:
    - core.pipeline → descritores, Store, estado de execução e builder
    - core.engine   → continuação (`next`) e executor de Steps
    - core.config   → carregamento, merge e hashing de configuração

Exemplo:
    >>> greet = (
    ...     create_pipeline("greet")
    ...     .input("Ada")
    ...     .pipe(str.upper, "0", "name")
    ...     .pipe(lambda name: f"Hello, {name}", "name", "greeting")
    ...     .end()
    ... )
    >>> greet()
"""

from .core.config import load_config, resolve_config
from .core.engine.engine import PipelineExecution, exec_pipeline
from .core.engine.executor import execute_pipe
from .core.exceptions import (
    ConfigError,
    MissingInputError,
    OutputMappingError,
    PipeflowException,
    PipelineConfigurationError,
    UnhandledStepError,
    UnknownDependencyError,
)
from .core.pipeline.builder import Pipeline, create_pipeline
from .core.pipeline.descriptor import PipeDescriptor, create_pipe
from .core.pipeline.state import PipeState
from .core.pipeline.store import Store
from .core.pipeline.types import Err, Ok, PipeKind, StepState

FN_INPUT = PipeKind.INPUT
FN_ERROR = PipeKind.ERROR

__all__ = [
    "ConfigError",
    "FN_ERROR",
    "FN_INPUT",
    "Err",
    "MissingInputError",
    "Ok",
    "OutputMappingError",
    "PipeDescriptor",
    "PipeKind",
    "PipeState",
    "PipeflowException",
    "Pipeline",
    "PipelineConfigurationError",
    "PipelineExecution",
    "StepState",
    "Store",
    "UnhandledStepError",
    "UnknownDependencyError",
    "create_pipe",
    "create_pipeline",
    "exec_pipeline",
    "execute_pipe",
    "load_config",
    "resolve_config",
]
