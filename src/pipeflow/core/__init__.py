# src/pipeflow/core/__init__.py
"""
Core do pipeflow.

Componentes principais:
    - config   → resolução de configuração (defaults, merge, hashing)
    - pipeline → tipos, descritores, Store, estado de execução e builder
    - engine   → continuação e executor de Steps

Princípios fundamentais:
    - Uma invocação, um Store; nenhum estado global
    - Erros são valores do Store até não existir handler
    - Execução estritamente sequencial e cooperativa
"""
