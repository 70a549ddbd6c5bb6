import logging

import pytest

from pystorekit import (
    Action, ReducerError, combine_reducers, create_action, create_reducer, create_store, on
)

increment = create_action("[Counter] Increment")
add = create_action("[Counter] Add", lambda amount: amount)


def counter():
    return create_reducer(
        0,
        on(increment, lambda state, action: state + 1),
        on(add, lambda state, action: state + action.payload),
        ("[Counter] Reset", lambda state, action: 0),
    )


class TestCreateReducer:
    def test_uses_initial_state_when_state_is_none(self):
        reducer = counter()

        assert reducer(None, {"type": "unknown"}) == 0
        assert reducer.initial_state == 0

    def test_dispatches_to_registered_handlers(self):
        reducer = counter()

        assert reducer(1, increment()) == 2
        assert reducer(1, add(5)) == 6
        assert reducer(9, Action("[Counter] Reset")) == 0

    def test_handles_dict_actions(self):
        reducer = counter()

        assert reducer(3, {"type": "[Counter] Increment"}) == 4

    def test_unknown_action_returns_same_state(self):
        state = {"nested": [1, 2]}
        reducer = create_reducer(state)

        assert reducer(state, {"type": "unknown"}) is state

    def test_unhashable_action_type_falls_through(self):
        store = create_store(create_reducer(0, on(increment, lambda state, action: state + 1)))

        store.dispatch({"type": ["list", "type"]})
        store.dispatch({"type": {"kind": "increment"}})

        assert store.get_state() == 0

    def test_seeds_store(self):
        store = create_store(counter())
        store.dispatch(add(3))

        assert store.get_state() == 3


class TestCombineReducers:
    def test_builds_state_per_key(self):
        reducer = combine_reducers({"counter": counter(), "todos": create_reducer(())})
        store = create_store(reducer)

        store.dispatch(increment())

        assert store.get_state() == {"counter": 1, "todos": ()}

    def test_preserves_state_identity_when_unchanged(self):
        reducer = combine_reducers({"counter": counter()})
        state = reducer(None, {"type": "init"})

        assert reducer(state, {"type": "unknown"}) is state
        assert reducer(state, increment()) is not state

    def test_rejects_non_callable_reducer(self):
        with pytest.raises(ReducerError, match='No reducer provided for key "broken"'):
            combine_reducers({"broken": None})

    def test_rejects_reducer_without_initial_state(self):
        with pytest.raises(ReducerError, match="returned None during initialization"):
            combine_reducers({"empty": lambda state=None, action=None: state})

    def test_rejects_reducer_returning_none(self):
        def flaky(state=None, action=None):
            if action is not None and action.get("type") == "drop":
                return None
            return state if state is not None else 0

        reducer = combine_reducers({"flaky": flaky})

        with pytest.raises(ReducerError, match='reducer "flaky" returned None'):
            reducer(None, {"type": "drop"})

    def test_drops_unexpected_keys_with_warning(self, caplog):
        reducer = combine_reducers({"counter": counter()})

        with caplog.at_level(logging.WARNING, logger="pystorekit.reducers"):
            state = reducer({"counter": 1, "stale": True}, {"type": "unknown"})

        assert state == {"counter": 1}
        assert "Unexpected keys" in caplog.text
