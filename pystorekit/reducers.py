"""
Reducer 工具模組。

提供以 action 類型分派的 create_reducer / on，以及把多個 slice reducer
組合成單一 reducer 的 combine_reducers。
"""

import logging
from typing import Any, Dict, Mapping

from .actions import ActionTypes, get_action_type
from .errors import ReducerError
from .types import ActionHandler, HandlerMap, ReducerFunction, S

logger = logging.getLogger(__name__)


def create_reducer(initial_state: S, *handlers) -> ReducerFunction[S]:
    """
    創建一個 reducer 函式，用於處理狀態變更。

    Args:
        initial_state: 初始狀態。傳入的 state 為 None 時使用它。
        *handlers: 一系列 (action_type, handler_fn) 元組或使用 on 函式創建的處理器。

    Returns:
        一個 reducer 函式，根據 action 的類型執行對應的處理邏輯。
    """
    action_handlers: HandlerMap = {}  # 儲存 action 類型與處理函式的對應關係

    for handler in handlers:
        if isinstance(handler, tuple) and len(handler) == 2:
            action_type, handler_fn = handler
            action_handlers[action_type] = handler_fn
        else:
            action_handlers.update(handler)

    def reducer(state: S = None, action: Any = None) -> S:
        if state is None:
            state = initial_state
        if action is None:
            return state

        try:
            handler = action_handlers.get(get_action_type(action))
        except TypeError:
            # 不可雜湊的 type 不可能是已註冊的鍵
            return state
        if handler:
            return handler(state, action)
        # 沒有對應處理函式（包括 INIT / REPLACE），返回原狀態
        return state

    # 設置 reducer 的初始狀態和處理器映射
    reducer.initial_state = initial_state  # type: ignore[attr-defined]
    reducer.handlers = action_handlers  # type: ignore[attr-defined]

    return reducer


def on(action_creator_or_type, handler: ActionHandler) -> HandlerMap:
    """
    創建一個 action 類型與處理函式的映射。

    Args:
        action_creator_or_type: Action 創建器函式或 Action 類型。
        handler: 處理該 Action 的函式，接收 (state, action) 並返回新狀態。

    Returns:
        一個包含 {action_type: handler} 的字典。
    """
    if callable(action_creator_or_type) and hasattr(action_creator_or_type, 'type'):
        action_type = action_creator_or_type.type
    else:
        action_type = action_creator_or_type

    return {action_type: handler}


def _assert_reducer_shape(reducers: Mapping[str, ReducerFunction]) -> None:
    for key, reducer in reducers.items():
        initial_state = reducer(None, {"type": ActionTypes.INIT})
        if initial_state is None:
            raise ReducerError(
                f'Reducer "{key}" returned None during initialization. '
                "If the state passed to the reducer is None, you must explicitly "
                "return the initial state.",
                reducer_name=key,
                action_type=ActionTypes.INIT,
            )


def combine_reducers(reducers: Mapping[str, ReducerFunction]) -> ReducerFunction[Dict[str, Any]]:
    """
    把以狀態鍵名為索引的多個 reducer 組合成一個 reducer。

    每個 reducer 只負責狀態中對應鍵名的部分。若所有部分都沒有改變（以 is 比較），
    回傳原本的狀態物件。

    Args:
        reducers: 狀態鍵名到 reducer 的映射。

    Returns:
        組合後的 reducer，狀態為 dict。

    Raises:
        ReducerError: 某個值不是可呼叫物件，或 reducer 在初始化時回傳 None。
    """
    final_reducers: Dict[str, ReducerFunction] = {}
    for key, reducer in reducers.items():
        if not callable(reducer):
            raise ReducerError(f'No reducer provided for key "{key}".', reducer_name=key)
        final_reducers[key] = reducer

    _assert_reducer_shape(final_reducers)

    def combination(state: Any = None, action: Any = None) -> Dict[str, Any]:
        if state is None:
            state = {}

        unexpected = [key for key in state if key not in final_reducers]
        if unexpected:
            logger.warning(
                "Unexpected keys %s found in state; they will be ignored. "
                "Expected one of the known reducer keys: %s",
                unexpected,
                list(final_reducers),
            )

        has_changed = False
        next_state: Dict[str, Any] = {}
        for key, reducer in final_reducers.items():
            previous_substate = state.get(key)
            next_substate = reducer(previous_substate, action)
            if next_substate is None:
                raise ReducerError(
                    f'Given action {get_action_type(action)!r}, reducer "{key}" returned None. '
                    "To ignore an action, you must explicitly return the previous state.",
                    reducer_name=key,
                    action_type=get_action_type(action),
                )
            next_state[key] = next_substate
            has_changed = has_changed or next_substate is not previous_substate

        has_changed = has_changed or len(final_reducers) != len(state)
        return next_state if has_changed else state

    return combination
