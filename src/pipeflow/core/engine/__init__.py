# src/pipeflow/core/engine/__init__.py
"""
Engine do pipeflow.

Componentes principais:
    - engine   → `exec_pipeline` e a continuação `next` de cada invocação
    - executor → `execute_pipe`: inputs, chamada do Step, outputs e auto-advance

Invariantes:
    - Steps executam um de cada vez, na ordem da lista
    - Um erro sem error handler encerra a invocação com exceção
    - O error handler é o último Step executado na invocação
"""
