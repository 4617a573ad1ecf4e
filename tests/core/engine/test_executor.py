# tests/core/engine/test_executor.py
"""
Testes unitários do executor de Steps (execute_pipe).

Cada teste executa um único Step contra um Store isolado e registra o que
foi repassado à continuação, sem envolver o Engine.
"""

import pytest

from pipeflow import (
    MissingInputError,
    OutputMappingError,
    PipeKind,
    PipeState,
    Store,
    UnknownDependencyError,
    create_pipe,
    execute_pipe,
)


def _run(pipe, *, args=(), deps=None, store=None, err=None):
    recorded = []
    state = PipeState.from_descriptor(
        pipe,
        index=0,
        continuation=lambda error=None, *result: recorded.append((error, result)),
    )
    store = store if store is not None else Store(pipeline="unit")
    execute_pipe(err, args, deps or {}, store, state)
    return recorded, store, state


def test_input_pipe_seeds_positional_keys_per_invocation():
    store = Store(pipeline="unit")
    _run(create_pipe(PipeKind.INPUT, "a"), store=store)
    _run(create_pipe(PipeKind.INPUT, {"k": 1}), store=store)
    recorded, _, _ = _run(create_pipe(PipeKind.INPUT, "b"), store=store)

    assert store.snapshot() == {"0": "a", "k": 1, "1": "b"}
    assert recorded == [(None, ())]


def test_store_value_wins_over_call_argument():
    store = Store(pipeline="unit")
    store.set_one("0", "stored")

    recorded, _, _ = _run(create_pipe(lambda v: v, "0", "out"), args=("arg",), store=store)

    assert recorded == [(None, ({"out": "stored"},))]


def test_digit_key_falls_back_to_call_argument():
    recorded, _, _ = _run(create_pipe(lambda v: v * 2, "0", "out"), args=(21,))
    assert recorded == [(None, ({"out": 42},))]


def test_missing_optional_input_skips_step(engine_config, calls):
    store = Store(pipeline="unit", config=engine_config)
    recorded, _, _ = _run(create_pipe(calls.append, "absent", optional=True), store=store)

    assert calls == []
    assert recorded == [(None, ())]
    assert store.events[-1]["message"] == "step_skipped"
    assert store.events[-1]["missing"] == ["absent"]


def test_missing_required_input_is_reported():
    recorded, _, _ = _run(create_pipe(lambda v: v, "absent"))

    (error, result), = recorded
    assert isinstance(error, MissingInputError)
    assert error.details["missing"] == ["absent"]
    assert result == ()


def test_dependency_resolved_by_name():
    recorded, _, _ = _run(
        create_pipe("double", "0", "out"),
        args=(2,),
        deps={"double": lambda v: v * 2},
    )
    assert recorded == [(None, ({"out": 4},))]


def test_negated_dependency_inverts_result():
    recorded, _, state = _run(
        create_pipe("!isEmpty", "0", "filled"),
        args=("",),
        deps={"isEmpty": lambda v: not v},
    )
    assert state.label == "isEmpty"
    assert recorded == [(None, ({"filled": False},))]


def test_unknown_dependency_is_reported():
    recorded, _, _ = _run(create_pipe("nowhere", "0"), args=(1,))

    (error, _), = recorded
    assert isinstance(error, UnknownDependencyError)
    assert error.details["dependency"] == "nowhere"


def test_dependencies_injected_by_parameter_name():
    repo = {"ada": "Ada Lovelace"}

    def lookup(key, repo):
        return repo[key]

    recorded, _, _ = _run(create_pipe(lookup, "0", "full"), args=("ada",), deps={"repo": repo})
    assert recorded == [(None, ({"full": "Ada Lovelace"},))]


def test_multiple_outputs_are_distributed_in_order():
    recorded, _, _ = _run(create_pipe(lambda: ("a", "b"), None, ["first", "second"]))
    assert recorded == [(None, ({"first": "a", "second": "b"},))]


def test_output_count_mismatch_is_reported():
    recorded, _, _ = _run(create_pipe(lambda: ("only",), None, ["first", "second"]))

    (error, _), = recorded
    assert isinstance(error, OutputMappingError)


def test_output_map_renames_result_keys():
    recorded, _, _ = _run(
        create_pipe(lambda: {"id": 7, "ignored": True}, None, {"id": "user_id"})
    )
    assert recorded == [(None, ({"user_id": 7},))]


def test_manual_step_does_not_auto_advance(calls):
    def manual(next):
        calls.append("ran")
        return "ignored"

    recorded, _, state = _run(create_pipe(manual, "next", "out"))

    assert calls == ["ran"]
    assert recorded == []
    assert state.fn_returned is True
    assert state.result == "ignored"


def test_step_exception_is_reported_through_continuation():
    def explode():
        raise ValueError("bad")

    recorded, _, _ = _run(create_pipe(explode))

    (error, _), = recorded
    assert isinstance(error, ValueError)


def test_handler_without_inputs_receives_current_error():
    received = []
    recorded, _, _ = _run(create_pipe(PipeKind.ERROR, received.append), err="boom")

    assert received == ["boom"]
    assert recorded == [(None, ())]


def test_handler_missing_input_raises():
    with pytest.raises(MissingInputError):
        _run(create_pipe(PipeKind.ERROR, lambda v: v, "absent"), err="boom")
