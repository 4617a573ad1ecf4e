# tests/core/pipeline/test_store.py
"""
Testes do Store de invocação.

Os testes asseguram que:
- escritas simples e em lote passam pelo mesmo caminho (chaves como str)
- `seed` grava valores posicionais ou mescla mappings
- `outcome()` reflete a chave reservada `error`
- eventos estruturados carregam pipeline, step e timestamp
"""

from pipeflow.core.pipeline.store import Store
from pipeflow.core.pipeline.types import Err, Ok


def test_set_single_and_bulk():
    store = Store()
    store.set("a", 1)
    store.set({"b": 2, "a": 3})
    store.set_one("c", None)
    assert store.snapshot() == {"a": 3, "b": 2, "c": None}
    assert "c" in store
    assert store["b"] == 2


def test_non_string_keys_are_normalized():
    store = Store()
    store.merge_many({0: "zero"})
    assert store.get("0") == "zero"


def test_seed_positional_and_mapping():
    store = Store()
    store.seed("Ada")
    store.seed({"lang": "en"})
    store.seed("Grace")
    assert store.snapshot() == {"0": "Ada", "lang": "en", "1": "Grace"}


def test_outcome_follows_error_key():
    store = Store()
    assert store.outcome() == Ok()
    store.set("error", "boom")
    assert store.outcome() == Err("boom")
    assert store.error == "boom"


def test_snapshot_hides_continuation():
    store = Store()
    store.set("next", lambda *a: None)
    store.set("x", 1)
    assert store.snapshot() == {"x": 1}
    assert store.has("next")


def test_missing_key_raises_key_error():
    store = Store()
    try:
        store["nope"]
    except KeyError as exc:
        assert exc.args == ("nope",)
    else:
        raise AssertionError("KeyError expected")


def test_structured_log_event():
    store = Store(pipeline="greet")
    store.log(step_id="toUpper", level="INFO", message="hello", step_index=1)
    ev = store.events[-1]
    assert ev["pipeline"] == "greet"
    assert ev["step_id"] == "toUpper"
    assert ev["level"] == "INFO"
    assert ev["message"] == "hello"
    assert ev["step_index"] == 1
    assert ev["timestamp"].endswith("+00:00")


def test_trace_disabled_by_config():
    store = Store(config={"engine": {"trace": False}})
    store.log(step_id=None, level="INFO", message="ignored")
    assert store.events == []
