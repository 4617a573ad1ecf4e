# tests/conftest.py
"""
Fixtures compartilhados para testes do pipeflow.

Este módulo fornece:
- YAMLs de configuração mínimos (defaults + override local)
- configuração efetiva já resolvida
- Steps de exemplo do cenário "greet"
- um gravador de chamadas para observar a ordem de execução

Invariantes:
    - Nenhuma fixture executa pipeline
    - Nenhuma fixture realiza I/O
    - Dados retornados são determinísticos e isolados
"""

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """Conteúdo típico de um `pipeflow.defaults.yaml`."""
    return """\
engine:
  capture_exceptions: true
  trace: true
pipelines:
  greet:
    enabled: true
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """Override local: desliga o trace e captura de exceções."""
    return """\
engine:
  trace: false
pipelines:
  greet:
    enabled: false
"""


@pytest.fixture
def engine_config() -> dict:
    """
    Configuração efetiva mínima para testes do engine.

    O import é feito de forma lazy para que uma falha no pacote de config
    apareça como erro do teste, não da coleta.
    """
    from pipeflow.core.config import resolve_config

    return resolve_config({"engine": {"trace": True}})


# =====================================================
# Steps do cenário "greet"
# =====================================================

@pytest.fixture
def greet_steps() -> dict:
    """
    Funções do cenário "greet", indexadas pelo nome usado como dependência.

    - toUpper: converte o nome para maiúsculas
    - prefixHello: monta a saudação
    """

    def to_upper(value):
        return value.upper()

    def prefix_hello(name):
        return f"Hello, {name}"

    return {"toUpper": to_upper, "prefixHello": prefix_hello}


@pytest.fixture
def calls():
    """Lista compartilhada onde Steps de teste registram sua execução."""
    return []
