"""
pipeflow — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do pipeflow.

Objetivo:
- Permitir que o Builder, o Executor e o Engine levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para PipeflowErrorPayload
- Evitar ValueError/RuntimeError genéricos nos pontos críticos do pipeline

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- A mensagem é curta e humana; o contexto vai em `details` e `hint`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class PipeflowException(Exception):
    """Base class para exceções internas do pipeflow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Builder / Configuração
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class PipelineConfigurationError(PipeflowException):
    """Definição de pipeline inválida (ex.: segundo error handler)."""


# ---------------------------------------------------------------------------
# Execução de Steps (reportadas via continuação)
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class MissingInputError(PipeflowException):
    """Input declarado por um Step não existe no store nem nos argumentos."""


@dataclass(eq=False)
class UnknownDependencyError(PipeflowException):
    """Step referencia por nome uma função ausente do bag de dependências."""


@dataclass(eq=False)
class OutputMappingError(PipeflowException):
    """Resultado do Step não é compatível com o output declarado."""


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class UnhandledStepError(PipeflowException):
    """Erro reportado por um Step sem error handler registrado no pipeline."""


# ---------------------------------------------------------------------------
# Configuração
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ConfigError(PipeflowException):
    """Base para falhas ao carregar ou resolver a configuração do engine."""


@dataclass(eq=False)
class ConfigFileNotFoundError(ConfigError):
    """Arquivo de configuração obrigatório inexistente."""


@dataclass(eq=False)
class UnsupportedConfigFormatError(ConfigError):
    """Extensão de arquivo sem parser (suportados: .yaml, .yml, .json)."""


@dataclass(eq=False)
class InvalidConfigRootTypeError(ConfigError):
    """Raiz do arquivo não é um mapa chave-valor."""


@dataclass(eq=False)
class ConfigTypeConflictError(ConfigError):
    """Override com tipo incompatível com o valor que substitui."""


@dataclass(eq=False)
class InvalidEngineOptionError(ConfigError):
    """Opção `engine.*` desconhecida ou com valor não booleano."""
