"""
Shared fixtures for the pystorekit test suite.
"""

import pytest

from pystorekit import create_store
from pystorekit.actions import get_action_type


def counter_reducer(state=None, action=None):
    """Counter reducer working on plain dict actions and Action records."""
    if state is None:
        state = {"count": 0, "other": 0}

    action_type = get_action_type(action)
    if action_type == "increment":
        return {**state, "count": state["count"] + 1}
    if action_type == "add":
        return {**state, "count": state["count"] + action["amount"]}
    if action_type == "other":
        return {**state, "other": state["other"] + 1}
    return state


@pytest.fixture
def reducer():
    return counter_reducer


@pytest.fixture
def store():
    return create_store(counter_reducer)
