# tests/core/engine/test_engine_trace.py
"""
Testes do trace estruturado gravado no Store (Store.events).

Os testes asseguram que:
- a sequência de eventos do happy path é determinística
- pseudo-steps de input não geram eventos
- erros roteados geram payload canônico
- `engine.trace: false` desliga o registro de eventos
"""

from pipeflow import PipeKind, create_pipe, exec_pipeline, resolve_config
from pipeflow.core.config import compute_config_hash
from pipeflow.core.errors import STEP_REPORTED_ERROR


def _greet_pipes():
    return [
        create_pipe(PipeKind.INPUT, "Ada"),
        create_pipe("toUpper", "0", "name"),
        create_pipe("prefixHello", "name", "greeting"),
    ]


def test_happy_path_event_sequence(greet_steps, engine_config):
    store = exec_pipeline("greet", _greet_pipes(), (), deps=greet_steps, config=engine_config)

    assert [e["message"] for e in store.events] == [
        "pipeline_started",
        "step_started",
        "step_completed",
        "step_started",
        "step_completed",
        "pipeline_finished",
    ]
    assert [e["step_id"] for e in store.events] == [
        None,
        "toUpper",
        "toUpper",
        "prefixHello",
        "prefixHello",
        None,
    ]


def test_events_carry_required_fields(greet_steps, engine_config):
    store = exec_pipeline("greet", _greet_pipes(), (), deps=greet_steps, config=engine_config)

    for event in store.events:
        assert event["pipeline"] == "greet"
        assert event["level"] == "INFO"
        assert "timestamp" in event

    assert store.events[0]["config_hash"] == compute_config_hash(engine_config)
    assert store.events[1]["step_index"] == 1


def test_routed_error_records_payload(engine_config):
    def fail(next):
        next("nope")

    store = exec_pipeline(
        "routing",
        [create_pipe(fail, "next")],
        (),
        error_handler=create_pipe(PipeKind.ERROR, lambda error: None),
        config=engine_config,
    )

    messages = [e["message"] for e in store.events]
    assert messages[:4] == ["pipeline_started", "step_started", "step_failed", "error_routed"]
    assert "pipeline_finished" not in messages

    routed = store.events[3]
    assert routed["level"] == "ERROR"
    assert routed["step_id"] == "fail"
    assert routed["error"]["type"] == STEP_REPORTED_ERROR
    assert routed["error"]["message"] == "nope"


def test_trace_disabled_records_nothing(greet_steps):
    config = resolve_config({"engine": {"trace": False}})
    store = exec_pipeline("greet", _greet_pipes(), (), deps=greet_steps, config=config)

    assert store.events == []
    assert store.get("greeting") == "Hello, ADA"
