"""
將中介軟體套用到 Store dispatch 的 store enhancer。
"""
import inspect
import logging
from typing import Any, Callable, Generic, List, TypeVar

from .compose import compose
from .errors import MiddlewareError
from .types import DispatchFunction, GetState, Listener, MiddlewareFunction, StoreCreator, StoreEnhancer, Unsubscribe

logger = logging.getLogger(__name__)

S = TypeVar("S")


class _DispatchCell:
    """保存目前 dispatch 函數的可變容器，初始內容是拒絕呼叫的守衛。"""

    def __init__(self) -> None:
        self.dispatch: DispatchFunction = self._constructing

    @staticmethod
    def _constructing(*args: Any, **kwargs: Any) -> Any:
        raise MiddlewareError(
            "Dispatching while constructing your middleware is not allowed. "
            "Other middleware would not be applied to this dispatch."
        )


class MiddlewareAPI:
    """
    傳給每個中介軟體的固定 API。

    dispatch 經由 _DispatchCell 延遲綁定，中介軟體在建構時保存的引用，
    在整條鏈組合完成後會自動走完整條中介軟體鏈。
    """

    def __init__(self, get_state: GetState, cell: _DispatchCell) -> None:
        self._get_state = get_state
        self._cell = cell

    def get_state(self) -> Any:
        return self._get_state()

    @property
    def state(self) -> Any:
        return self._get_state()

    def dispatch(self, *args: Any, **kwargs: Any) -> Any:
        return self._cell.dispatch(*args, **kwargs)


class EnhancedStore(Generic[S]):
    """
    套用中介軟體後的 Store。

    只有 dispatch 被替換成中介軟體鏈，其餘操作全部轉交給原始 Store。
    """

    def __init__(self, store: Any, dispatch: DispatchFunction) -> None:
        self._store = store
        self.dispatch = dispatch

    def get_state(self) -> S:
        return self._store.get_state()

    @property
    def state(self) -> S:
        return self._store.get_state()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        return self._store.subscribe(listener)

    def replace_reducer(self, next_reducer: Callable[[Any, Any], S]) -> None:
        self._store.replace_reducer(next_reducer)

    def __getattr__(self, name: str) -> Any:
        # observable、select 以及其他 enhancer 加上的屬性
        if name == "_store":
            raise AttributeError(name)
        return getattr(self._store, name)


def _instantiate(middleware: Any) -> Any:
    # 接受類和實例，如果是類則直接實例化
    return middleware() if inspect.isclass(middleware) else middleware


def apply_middleware(*middlewares: Any) -> StoreEnhancer:
    """
    創建一個將中介軟體應用於 dispatch 的 store enhancer。

    每個中介軟體以 MiddlewareAPI 呼叫，回傳 (next_dispatch) -> dispatch 的函數。
    列在前面的中介軟體在最外層，最先看到 action。

    若同時有多個 enhancer，apply_middleware 應放在組合鏈的第一位。

    Args:
        *middlewares: 中介軟體工廠函數、BaseMiddleware 實例或其類別。

    Returns:
        store enhancer。

    範例:
        >>> store = create_store(reducer, apply_middleware(LoggerMiddleware, ThunkMiddleware()))
    """
    def enhancer(create_store: StoreCreator) -> StoreCreator:
        def enhanced_create_store(*args: Any, **kwargs: Any) -> EnhancedStore[Any]:
            store = create_store(*args, **kwargs)
            cell = _DispatchCell()

            api = MiddlewareAPI(store.get_state, cell)
            chain: List[MiddlewareFunction] = [_instantiate(mw)(api) for mw in middlewares]
            cell.dispatch = compose(*chain)(store.dispatch)

            logger.debug("Applied %d middleware(s) to store", len(chain))
            return EnhancedStore(store, cell.dispatch)

        return enhanced_create_store

    return enhancer
