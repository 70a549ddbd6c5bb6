"""
基於 PyStoreKit 的 Action 定義模組。

此模組提供 Action 類別、創建 Action 的工具函數、Store 保留的內部 Action 類型，
以及判斷一個值是否為合法 Action 外殼（plain object）的檢查函數。
Actions 是描述狀態變更意圖的不可變對象。
"""
import random
import string
from typing import Any, Callable, Dict, Optional, Union, Generic, overload

from immutables import Map
from pydantic import BaseModel

from .types import P, ActionCreator, ActionCreatorWithoutPayload, ActionCreatorWithPayload


class Action(Generic[P]):
    """
    表示一個有類型和可選負載的動作。

    泛型參數:
        P: 負載的類型

    屬性:
        type: 動作的類型標識（不可為 None）
        payload: 動作的負載數據（可選）
    """
    __slots__ = ('type', 'payload')

    def __init__(self, type: Any, payload: Optional[P] = None):
        super().__setattr__('type', type)
        super().__setattr__('payload', payload)

    def __setattr__(self, name, value):
        if name not in self.__slots__:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        if hasattr(self, name):
            raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")
        super().__setattr__(name, value)

    def __eq__(self, other):
        if not isinstance(other, Action):
            return False
        return self.type == other.type and self.payload == other.payload

    def __hash__(self):
        return hash((self.type, self.payload))

    def __repr__(self):
        return f"Action(type={self.type!r}, payload={self.payload!r})"


def _random_suffix() -> str:
    chars = random.choices(string.digits + string.ascii_lowercase, k=6)
    return ".".join(chars)


class ActionTypes:
    """
    Store 保留的內部 Action 類型。

    加上隨機後綴，使用者程式碼不會意外產生相同的類型；
    reducer 對未知類型必須回傳目前狀態（或在狀態為 None 時回傳初始狀態）。
    """
    INIT = f"@@pystorekit/INIT{_random_suffix()}"
    REPLACE = f"@@pystorekit/REPLACE{_random_suffix()}"


def is_plain_object(obj: Any) -> bool:
    """
    判斷 obj 是否可以作為 Action 的外殼。

    接受 Action 實例、精確的 dict、immutables.Map，以及宣告了 type 欄位的
    pydantic 模型。其餘（None、基本型別、list/tuple、dict 子類、任意物件）一律拒絕。
    """
    if isinstance(obj, Action):
        return True
    if type(obj) is dict or isinstance(obj, Map):
        return True
    if isinstance(obj, BaseModel):
        return "type" in obj.__class__.model_fields
    return False


def get_action_type(action: Any) -> Any:
    """取得 action 的 type；沒有時回傳 None。"""
    if isinstance(action, (dict, Map)):
        return action.get("type")
    return getattr(action, "type", None)


def _process_payload(payload: Any) -> Any:
    """
    處理 payload，將字典轉換為不可變結構。

    Args:
        payload: 原始 payload

    Returns:
        處理後的 payload
    """
    if isinstance(payload, dict):
        return Map(payload)
    return payload


@overload
def create_action(action_type: str) -> ActionCreatorWithoutPayload:
    ...


@overload
def create_action(action_type: str, prepare_fn: Callable[..., P]) -> ActionCreatorWithPayload[P]:
    ...


def create_action(action_type: str, prepare_fn: Optional[Callable[..., Any]] = None) -> ActionCreator:
    """
    創建一個 Action 生成器函數。

    Args:
        action_type: Action 的類型標識符
        prepare_fn: 可選的預處理函數，用於在創建 Action 前處理輸入參數

    Returns:
        一個可調用的函數，用於生成指定類型的 Action

    範例:
        >>> increment = create_action("[Counter] Increment")
        >>> increment()
        Action(type='[Counter] Increment', payload=None)
        >>> add = create_action("[Counter] Add", lambda amount: amount)
        >>> add(5)
        Action(type='[Counter] Add', payload=5)
    """
    def action_creator(*args: Any, **kwargs: Any) -> Action[Any]:
        if prepare_fn:
            return Action(action_type, _process_payload(prepare_fn(*args, **kwargs)))
        if len(args) == 1 and not kwargs:
            return Action(action_type, _process_payload(args[0]))
        if args or kwargs:
            payload: Dict[Union[int, str], Any] = dict(zip(range(len(args)), args))
            payload.update(kwargs)
            return Action(action_type, _process_payload(payload))

        # 無參數，無負載
        return Action(action_type)

    # 添加 type 屬性以便於識別
    action_creator.type = action_type  # type: ignore

    return action_creator
