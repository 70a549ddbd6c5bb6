from typing import Literal

import pytest
from immutables import Map
from pydantic import BaseModel

from pystorekit import Action, ActionTypes, create_action, is_plain_object
from pystorekit.actions import get_action_type


class Typed(BaseModel):
    type: Literal["typed"] = "typed"
    amount: int = 0


class Plain(BaseModel):
    amount: int = 0


class Custom(dict):
    pass


class TestAction:
    def test_is_immutable(self):
        action = Action("increment", 1)

        with pytest.raises(AttributeError):
            action.type = "decrement"
        with pytest.raises(AttributeError):
            action.extra = True

    def test_equality_and_hash(self):
        assert Action("a", 1) == Action("a", 1)
        assert Action("a", 1) != Action("a", 2)
        assert Action("a") != {"type": "a"}
        assert len({Action("a", 1), Action("a", 1)}) == 1


class TestCreateAction:
    def test_without_payload(self):
        increment = create_action("[Counter] Increment")

        assert increment.type == "[Counter] Increment"
        assert increment() == Action("[Counter] Increment")

    def test_single_argument_becomes_payload(self):
        add = create_action("[Counter] Add")

        assert add(5).payload == 5

    def test_prepare_function(self):
        reset = create_action("[Counter] Reset", lambda value=0: value * 10)

        assert reset().payload == 0
        assert reset(2).payload == 20

    def test_dict_payload_is_frozen(self):
        update = create_action("[User] Update")

        payload = update({"name": "ada"}).payload

        assert isinstance(payload, Map)
        assert payload["name"] == "ada"

    def test_multiple_arguments_are_collected(self):
        move = create_action("[Point] Move")

        payload = move(1, 2, label="p")

        assert payload.payload == Map({0: 1, 1: 2, "label": "p"})


@pytest.mark.parametrize(
    "value, expected",
    [
        (Action("a"), True),
        ({"type": "a"}, True),
        ({}, True),
        (Map({"type": "a"}), True),
        (Typed(), True),
        (Plain(), False),
        (Custom(type="a"), False),
        (None, False),
        (42, False),
        ("a", False),
        ([{"type": "a"}], False),
        (({"type": "a"},), False),
        (object(), False),
    ],
)
def test_is_plain_object(value, expected):
    assert is_plain_object(value) is expected


def test_get_action_type():
    assert get_action_type({"type": "a"}) == "a"
    assert get_action_type({}) is None
    assert get_action_type(Action("b")) == "b"
    assert get_action_type(Typed()) == "typed"


def test_reserved_action_types_are_namespaced():
    assert ActionTypes.INIT.startswith("@@pystorekit/INIT")
    assert ActionTypes.REPLACE.startswith("@@pystorekit/REPLACE")
    assert ActionTypes.INIT != ActionTypes.REPLACE
