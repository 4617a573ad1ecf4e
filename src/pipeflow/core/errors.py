"""
pipeflow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do pipeflow.
Erros reportados por Steps são valores do store até o momento em que
não existe handler; para rastreabilidade eles são convertidos em payloads:

- explícitos
- serializáveis
- acionáveis
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from pipeflow.core.exceptions import PipeflowException


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PipeflowErrorPayload:
    """
    Payload canônico de erro do pipeflow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao autor do pipeline
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Builder
PIPELINE_CONFIGURATION_ERROR = "PIPELINE_CONFIGURATION_ERROR"

# Executor
STEP_MISSING_INPUT = "STEP_MISSING_INPUT"
STEP_UNKNOWN_DEPENDENCY = "STEP_UNKNOWN_DEPENDENCY"
STEP_OUTPUT_MAPPING = "STEP_OUTPUT_MAPPING"
STEP_REPORTED_ERROR = "STEP_REPORTED_ERROR"
STEP_EXCEPTION = "STEP_EXCEPTION"

# Engine
ENGINE_UNHANDLED_ERROR = "ENGINE_UNHANDLED_ERROR"

_EXCEPTION_TYPES = {
    "PipelineConfigurationError": PIPELINE_CONFIGURATION_ERROR,
    "MissingInputError": STEP_MISSING_INPUT,
    "UnknownDependencyError": STEP_UNKNOWN_DEPENDENCY,
    "OutputMappingError": STEP_OUTPUT_MAPPING,
    "UnhandledStepError": ENGINE_UNHANDLED_ERROR,
}

ERROR_HANDLER_HINT = (
    'use .error(handler_fn, ["error"]) para tratar este erro dentro do pipeline'
)


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def error_to_payload(error: Any, *, step: Optional[str] = None) -> PipeflowErrorPayload:
    """Converte qualquer erro reportado por um Step em PipeflowErrorPayload.

    Regras:
    - PipeflowException: tipo vem do catálogo, details/hint preservados.
    - Outras exceções: STEP_EXCEPTION com a classe em details.
    - Valores livres (str, dict, ...): STEP_REPORTED_ERROR com o texto.
    """
    if isinstance(error, PipeflowException):
        details = dict(error.details or {})
        details.setdefault("step", step)
        return PipeflowErrorPayload(
            type=_EXCEPTION_TYPES.get(error.__class__.__name__, STEP_EXCEPTION),
            message=error.message,
            details=details,
            hint=error.hint,
        )

    if isinstance(error, BaseException):
        return PipeflowErrorPayload(
            type=STEP_EXCEPTION,
            message=str(error) or error.__class__.__name__,
            details={"step": step, "exception_class": error.__class__.__name__},
            hint=ERROR_HANDLER_HINT,
        )

    return PipeflowErrorPayload(
        type=STEP_REPORTED_ERROR,
        message=str(error),
        details={"step": step},
        hint=ERROR_HANDLER_HINT,
    )


def unhandled_step_error(
    *,
    pipeline: str,
    step_index: int,
    step: str,
    error: Any,
) -> PipeflowErrorPayload:
    return PipeflowErrorPayload(
        type=ENGINE_UNHANDLED_ERROR,
        message=(
            f'Error was triggered in pipeline "{pipeline}" '
            f'step "{step_index}:{step}": {error}\n'
            f"(Tip: {ERROR_HANDLER_HINT})"
        ),
        details={
            "pipeline": pipeline,
            "step_index": step_index,
            "step": step,
            "error": str(error),
        },
        hint=ERROR_HANDLER_HINT,
    )
