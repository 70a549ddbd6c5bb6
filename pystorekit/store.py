"""
PyStoreKit 的核心 Store 模組。

包含 Store 類別與 create_store 工廠。Store 保存單一狀態樹，
透過 dispatch 把 action 交給 reducer 產生下一個狀態，並同步通知訂閱者。
"""

import logging
from typing import Any, Callable, Generic, List, Optional, TypeVar

import reactivex
from reactivex import Observable, operators as ops
from reactivex.disposable import Disposable

from .actions import ActionTypes, get_action_type, is_plain_object
from .errors import ActionError, StoreError, ValidationError
from .types import Listener, ReducerFunction, StoreEnhancer, Unsubscribe

logger = logging.getLogger(__name__)

S = TypeVar("S")


class Store(Generic[S]):
    """
    狀態容器，管理應用狀態並在每次狀態轉移後通知訂閱者。

    狀態只能透過 dispatch 一個 action 給 reducer 來改變。
    Store 內部維護兩份訂閱者列表：已提交的列表（正在或即將被通知迴圈走訪）
    與工作列表（subscribe/unsubscribe 修改的對象）。兩者在第一次修改前是
    同一個物件，修改前才複製，因此 listener 在通知期間訂閱或取消訂閱，
    都不會影響正在進行的通知。

    reducer 執行期間 Store 處於 dispatching 狀態，此時 get_state、subscribe、
    unsubscribe 與 dispatch 都會拋出 StoreError。
    """

    def __init__(self, reducer: ReducerFunction[S], preloaded_state: Optional[S] = None):
        """
        建立 Store 並立即 dispatch INIT action，讓 reducer 回報它的初始狀態。

        Args:
            reducer: 接收 (state, action) 並回傳下一個狀態的純函數。
            preloaded_state: 可選的初始狀態，會作為 INIT 時傳給 reducer 的 state。

        Raises:
            ValidationError: reducer 不是可呼叫物件。
        """
        if not callable(reducer):
            raise ValidationError(
                "Expected the reducer to be a function.",
                field="reducer",
                value=reducer,
                expected_type="callable",
            )

        self._current_reducer = reducer
        self._current_state = preloaded_state
        self._current_listeners: List[Listener] = []
        self._next_listeners = self._current_listeners
        self._is_dispatching = False

        logger.debug("Creating store with reducer %r", reducer)
        # 讓每個 reducer 回傳它的預設狀態，填充初始 state tree
        self.dispatch({"type": ActionTypes.INIT})

    def _ensure_can_mutate_next_listeners(self) -> None:
        if self._next_listeners is self._current_listeners:
            self._next_listeners = list(self._current_listeners)

    def get_state(self) -> S:
        """
        讀取目前的狀態。

        Raises:
            StoreError: reducer 正在執行。reducer 已經以參數取得了狀態。
        """
        if self._is_dispatching:
            raise StoreError(
                "You may not call store.get_state() while the reducer is executing. "
                "The reducer has already received the state as an argument. "
                "Pass it down from the top reducer instead of reading it from the store.",
                operation="get_state",
            )

        return self._current_state

    @property
    def state(self) -> S:
        """get_state() 的屬性形式。"""
        return self.get_state()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        添加一個訂閱者，每次 dispatch 完成後呼叫。

        訂閱者列表在每次通知開始前提交一份快照：
        通知期間新增的訂閱者從下一次 dispatch 才會被呼叫；
        通知期間被移除的訂閱者，若已在快照中，這一輪仍會被呼叫。

        Args:
            listener: 無參數的回調函數。

        Returns:
            取消此訂閱的函數。重複呼叫不會有任何效果。
        """
        if not callable(listener):
            raise ValidationError(
                "Expected the listener to be a function.",
                field="listener",
                value=listener,
                expected_type="callable",
            )

        if self._is_dispatching:
            raise StoreError(
                "You may not call store.subscribe() while the reducer is executing. "
                "If you would like to be notified after the store has been updated, "
                "subscribe from a listener and call store.get_state() in the callback.",
                operation="subscribe",
            )

        is_subscribed = True

        self._ensure_can_mutate_next_listeners()
        self._next_listeners.append(listener)

        def unsubscribe() -> None:
            nonlocal is_subscribed
            if not is_subscribed:
                return

            if self._is_dispatching:
                raise StoreError(
                    "You may not unsubscribe from a store listener while the reducer is executing.",
                    operation="unsubscribe",
                )

            is_subscribed = False

            self._ensure_can_mutate_next_listeners()
            for index, registered in enumerate(self._next_listeners):
                if registered is listener:
                    del self._next_listeners[index]
                    break

        return unsubscribe

    def dispatch(self, action: Any) -> Any:
        """
        分發一個 action，這是改變狀態的唯一方式。

        以目前狀態與 action 呼叫 reducer，將回傳值作為新狀態，
        然後依註冊順序通知所有訂閱者。

        Args:
            action: 描述「發生了什麼」的 plain object，必須有非 None 的 type。

        Returns:
            原封不動的 action。

        Raises:
            ActionError: action 不是 plain object，或 type 未定義。
            StoreError: 在 reducer 內部呼叫 dispatch。
        """
        if not is_plain_object(action):
            raise ActionError(
                "Actions must be plain objects. "
                "Use custom middleware for function actions.",
                action=action,
            )

        if get_action_type(action) is None:
            raise ActionError(
                'Actions may not have an undefined "type" property. '
                "Have you misspelled a constant?",
                action=action,
            )

        if self._is_dispatching:
            raise StoreError("Reducers may not dispatch actions.", operation="dispatch")

        try:
            self._is_dispatching = True
            self._current_state = self._current_reducer(self._current_state, action)
        finally:
            self._is_dispatching = False

        listeners = self._current_listeners = self._next_listeners
        for index in range(len(listeners)):
            listener = listeners[index]
            listener()

        return action

    def replace_reducer(self, next_reducer: ReducerFunction[S]) -> None:
        """
        替換 Store 用來計算狀態的 reducer，並 dispatch REPLACE action
        讓新的 reducer 重新計算每一塊狀態。

        Args:
            next_reducer: 新的 reducer。

        Raises:
            ValidationError: next_reducer 不是可呼叫物件。
        """
        if not callable(next_reducer):
            raise ValidationError(
                "Expected the next_reducer to be a function.",
                field="next_reducer",
                value=next_reducer,
                expected_type="callable",
            )

        logger.debug("Replacing reducer %r with %r", self._current_reducer, next_reducer)
        self._current_reducer = next_reducer
        self.dispatch({"type": ActionTypes.REPLACE})

    def observable(self) -> Observable:
        """
        與 reactivex 互通的狀態流。

        每個訂閱者在訂閱時立即收到目前狀態，之後每次 dispatch 完成都會收到最新狀態。
        dispose 訂閱即取消底層的 listener。
        """
        def on_subscribe(observer, scheduler=None):
            def observe_state() -> None:
                observer.on_next(self.get_state())

            observe_state()
            unsubscribe = self.subscribe(observe_state)
            return Disposable(unsubscribe)

        return reactivex.create(on_subscribe)

    def select(self, selector: Optional[Callable[[S], Any]] = None) -> Observable:
        """
        選擇狀態的一部分進行觀察。

        Args:
            selector: 一個函數，接收整個狀態並返回希望觀察的部分。

        Returns:
            一個可觀察對象，只在選定部分改變時發送。
        """
        if selector is None:
            return self.observable()

        return self.observable().pipe(
            ops.map(selector),
            # 只有當選定的值變化時才發出
            ops.distinct_until_changed(),
        )


def create_store(
    reducer: ReducerFunction[S],
    preloaded_state: Optional[Any] = None,
    enhancer: Optional[StoreEnhancer] = None
) -> Store[S]:
    """
    創建一個 Store。

    Args:
        reducer: 接收目前狀態與 action，回傳下一個狀態的函數。
        preloaded_state: 可選的初始狀態。若傳入可呼叫物件且未指定 enhancer，
            則視為 enhancer。
        enhancer: 可選的 store enhancer，例如 apply_middleware(...) 的結果。

    Returns:
        Store 實例；有 enhancer 時為 enhancer 產生的 Store。

    範例:
        >>> store = create_store(counter_reducer, apply_middleware(ThunkMiddleware()))
    """
    if callable(preloaded_state) and enhancer is None:
        enhancer = preloaded_state
        preloaded_state = None

    if enhancer is not None:
        if not callable(enhancer):
            raise ValidationError(
                "Expected the enhancer to be a function.",
                field="enhancer",
                value=enhancer,
                expected_type="callable",
            )

        return enhancer(create_store)(reducer, preloaded_state)

    return Store(reducer, preloaded_state)
