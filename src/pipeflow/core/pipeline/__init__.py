# src/pipeflow/core/pipeline/__init__.py
"""
# Pipeline Core — pipeflow

Este pacote define as estruturas que compõem um pipeline.

## Componentes

- **types**
  - `PipeKind`: Step normal, pseudo-step de input, error handler
  - `StepState`: PENDING → COMPLETED
  - `Ok` / `Err`: resultado discriminado lido do Store

- **descriptor**
  - `PipeDescriptor` / `create_pipe`: definição normalizada de um Step

- **store**
  - `Store`: contexto mutável de uma invocação (valores + eventos)

- **state**
  - `PipeState`: estado de uma invocação de Step e sua continuação protegida

- **builder**
  - `Pipeline` / `create_pipeline`: formas fluente e declarativa

## Invariantes

- No máximo um error handler por pipeline
- Um Store novo por invocação
- Um Step conclui no máximo uma vez
"""
