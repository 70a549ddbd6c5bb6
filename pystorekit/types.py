"""
PyStoreKit 共用型別定義模組。

集中定義 Store、Reducer、Middleware 等元件之間交換的型別別名與協定，
讓各模組在不互相導入實作的情況下共享同一套簽名。
"""
from typing import Any, Callable, Dict, Optional, TypeVar, Union

from typing_extensions import Protocol, TypedDict

# 狀態類型
S = TypeVar("S")
# 負載類型
P = TypeVar("P")
# 通用類型
T = TypeVar("T")

# Action 可以是 Action 實例、dict、immutables.Map 或帶有 type 欄位的 pydantic 模型
ActionLike = Any

Listener = Callable[[], None]
Unsubscribe = Callable[[], None]

ReducerFunction = Callable[[Optional[S], ActionLike], S]
ActionHandler = Callable[[S, ActionLike], S]
HandlerMap = Dict[Any, ActionHandler]

GetState = Callable[[], Any]
DispatchFunction = Callable[..., Any]
NextDispatch = DispatchFunction
MiddlewareFunction = Callable[[NextDispatch], DispatchFunction]

# 同步 thunk：以 (dispatch, get_state) 呼叫
ThunkFunction = Callable[[DispatchFunction, GetState], Any]

StateSelector = Callable[[S], T]


class ActionCreatorWithoutPayload(Protocol):
    type: str

    def __call__(self) -> Any: ...


class ActionCreatorWithPayload(Protocol[P]):
    type: str

    def __call__(self, *args: Any, **kwargs: Any) -> Any: ...


ActionCreator = Union[ActionCreatorWithoutPayload, ActionCreatorWithPayload[Any]]


class Store(Protocol[S]):
    """Store 對外公開的介面；基礎 Store 與經過 enhancer 包裝後的 Store 都必須符合。"""

    def dispatch(self, action: Any) -> Any: ...

    def get_state(self) -> S: ...

    def subscribe(self, listener: Listener) -> Unsubscribe: ...

    def replace_reducer(self, next_reducer: ReducerFunction[S]) -> None: ...


class MiddlewareAPIProtocol(Protocol):
    """傳給每個中介軟體的固定 API 物件。"""

    def get_state(self) -> Any: ...

    def dispatch(self, action: Any) -> Any: ...


Middleware = Callable[[MiddlewareAPIProtocol], MiddlewareFunction]

StoreCreator = Callable[..., Store[Any]]
StoreEnhancer = Callable[[StoreCreator], StoreCreator]


class ActionContext(TypedDict, total=False):
    """BaseMiddleware.action_context 在 dispatch 前後傳遞的上下文資料。"""

    action: Any
    prev_state: Any
    next_state: Any
    result: Any
    error: Optional[BaseException]
    timestamp: Any
