"""
基於 PyStoreKit 的中介軟體定義模組。

此模組提供各種中介軟體，用於在動作分發過程中插入自定義邏輯，
實現日誌記錄、thunk、錯誤上報、性能監控等功能。

所有中介軟體都遵循同一個簽名：以 MiddlewareAPI 呼叫，回傳
(next_dispatch) -> dispatch 的函數，可直接交給 apply_middleware。
"""

import contextlib
import datetime
import logging
import time
from typing import Any, Dict, Generator, List, Optional

from .actions import create_action, get_action_type
from .errors import ErrorHandler, PyStoreKitError, global_error_handler
from .types import (
    ActionContext, DispatchFunction, MiddlewareAPIProtocol, MiddlewareFunction, NextDispatch
)

logger = logging.getLogger(__name__)


# ———— Base Middleware ————
class BaseMiddleware:
    """
    基礎中介類，定義所有中介可能實現的鉤子。

    中介軟體可以介入動作分發的流程，在動作到達 Reducer 前、
    動作處理完成後或出現錯誤時執行自定義邏輯。
    子類只需覆寫需要的鉤子；需要改變 dispatch 行為的子類覆寫 __call__。
    """

    def on_next(self, action: Any, prev_state: Any) -> None:
        """
        在 action 發送給下一層 dispatch 之前調用。

        Args:
            action: 正在 dispatch 的 Action
            prev_state: dispatch 之前的狀態
        """
        pass

    def on_complete(self, next_state: Any, action: Any) -> None:
        """
        在下一層 dispatch 正常返回之後調用。

        Args:
            next_state: dispatch 之後的最新狀態
            action: 剛剛 dispatch 的 Action
        """
        pass

    def on_error(self, error: Exception, action: Any) -> None:
        """
        如果 dispatch 過程中拋出異常，則調用此鉤子。異常之後仍會繼續向上拋出。

        Args:
            error: 拋出的異常
            action: 導致異常的 Action
        """
        pass

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        """
        以上下文管理器的形式包裝一次 dispatch 的生命週期。

        子類可以覆蓋此方法，但應負責呼叫適當的 hook 方法。

        Yields:
            上下文字典；dispatch 完成後由呼叫端填入 next_state 與 result。
        """
        context: ActionContext = {
            'action': action,
            'prev_state': prev_state,
            'next_state': None,
            'result': None,
            'error': None,
        }

        self.on_next(action, prev_state)

        try:
            yield context
        except Exception as err:
            context['error'] = err
            self.on_error(err, action)
            raise

        self.on_complete(context['next_state'], action)

    def __call__(self, api: MiddlewareAPIProtocol) -> MiddlewareFunction:
        """
        配置中介軟體。

        dispatch 前會先呼叫 api.get_state() 取得 prev_state。若 reducer 透過
        增強後的 Store 重入 dispatch，最先觸發的是 get_state 的 StoreError
        (operation 為 "get_state")，而不是 dispatch 的錯誤；狀態不受影響。

        Args:
            api: 提供 get_state 與 dispatch 的 MiddlewareAPI

        Returns:
            配置函數，接收 next_dispatch 並返回新的 dispatch 函數
        """
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                with self.action_context(action, api.get_state()) as context:
                    result = next_dispatch(action)
                    context['result'] = result
                    context['next_state'] = api.get_state()
                return result
            return dispatch
        return middleware


# ———— LoggerMiddleware ————
class LoggerMiddleware(BaseMiddleware):
    """
    日誌中介，記錄每個 action 發送前和發送後的 state。

    使用場景:
    - 偵錯時需要觀察每次 state 的變化。
    - 確保 action 的執行順序正確。
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        """
        Args:
            logger: 使用的 logger，預設為本模組的 logger
            level: 正常訊息的日誌等級
        """
        self.logger = logger or logging.getLogger(__name__)
        self.level = level
        self._current_context: Optional[ActionContext] = None

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        self._current_context = {'timestamp': datetime.datetime.now()}
        try:
            with super().action_context(action, prev_state) as context:
                context['timestamp'] = self._current_context['timestamp']
                yield context
        finally:
            self._current_context = None

    def _timestamp(self) -> str:
        if self._current_context is None:
            return "-"
        return self._current_context["timestamp"].isoformat(sep=" ", timespec="milliseconds")

    def on_next(self, action: Any, prev_state: Any) -> None:
        stamp = self._timestamp()
        self.logger.log(self.level, "[%s] dispatching %s", stamp, get_action_type(action))
        self.logger.log(self.level, "[%s] state before %s: %r", stamp, get_action_type(action), prev_state)

    def on_complete(self, next_state: Any, action: Any) -> None:
        self.logger.log(self.level, "[%s] state after %s: %r", self._timestamp(), get_action_type(action), next_state)

    def on_error(self, error: Exception, action: Any) -> None:
        self.logger.error("[%s] error in %s: %s", self._timestamp(), get_action_type(action), error)


# ———— ThunkMiddleware ————
class ThunkMiddleware(BaseMiddleware):
    """
    支援 dispatch 同步函數 (thunk)，可以在 thunk 內多次 dispatch 或讀取狀態。

    thunk 以 (dispatch, get_state) 呼叫，其回傳值即 dispatch 的回傳值。
    thunk 內的 dispatch 會重新走完整條中介軟體鏈。

    範例:
        ```python
        def add_if_even(amount):
            def thunk(dispatch, get_state):
                if get_state()["count"] % 2 == 0:
                    dispatch(add(amount))
            return thunk

        store.dispatch(add_if_even(2))
        ```
    """

    def __call__(self, api: MiddlewareAPIProtocol) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                if callable(action):
                    return action(api.dispatch, api.get_state)
                return next_dispatch(action)
            return dispatch
        return middleware


# ———— ErrorMiddleware ————
global_error = create_action("[Error] GlobalError", lambda info: info)


class ErrorMiddleware(BaseMiddleware):
    """
    把 dispatch 過程中的異常交給錯誤處理器記錄，並可選擇 dispatch 一個
    全域錯誤 Action。原始異常之後仍會拋給呼叫端。

    使用場景:
    - 當需要統一處理所有異常並記錄或上報時。
    """

    def __init__(self, error_handler: Optional[ErrorHandler] = None, dispatch_error_action: bool = False):
        """
        Args:
            error_handler: 錯誤處理器，預設為 global_error_handler
            dispatch_error_action: 是否在出錯後 dispatch global_error Action
        """
        self.error_handler = error_handler or global_error_handler
        self.dispatch_error_action = dispatch_error_action
        self._api: Optional[MiddlewareAPIProtocol] = None

    def __call__(self, api: MiddlewareAPIProtocol) -> MiddlewareFunction:
        self._api = api
        return super().__call__(api)

    def on_error(self, error: Exception, action: Any) -> None:
        self.error_handler.handle(error, action)

        action_type = get_action_type(action)
        if not self.dispatch_error_action or action_type == global_error.type:
            return

        error_info = {
            "error": str(error),
            "error_type": error.__class__.__name__,
            "category": 'PyStoreKitError' if isinstance(error, PyStoreKitError) else 'GenericError',
            "action": action_type,
            "timestamp": time.time(),
        }
        self._api.dispatch(global_error(error_info))


# ———— PerformanceMonitorMiddleware ————
def _metric_key(action_type: Any) -> Any:
    try:
        hash(action_type)
    except TypeError:
        return repr(action_type)
    return action_type


class PerformanceMonitorMiddleware(BaseMiddleware):
    """
    性能監控中間件，記錄 action 處理時間。
    """

    def __init__(self, threshold_ms: float = 100, log_all: bool = False):
        """
        初始化 PerformanceMonitorMiddleware。

        Args:
            threshold_ms: 性能警告閾值，單位為毫秒，預設為 100 毫秒
            log_all: 是否記錄所有 action 的性能指標，預設為 False (只記錄超過閾值的)
        """
        self.threshold_ms = threshold_ms
        self.log_all = log_all
        self.metrics: Dict[Any, List[float]] = {}

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        start_time = time.perf_counter()
        action_type = get_action_type(action)
        try:
            with super().action_context(action, prev_state) as context:
                yield context
        except Exception as err:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error("Action %s failed after %.2fms: %s", action_type, elapsed_ms, err)
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self.metrics.setdefault(_metric_key(action_type), []).append(elapsed_ms)
        if elapsed_ms > self.threshold_ms:
            logger.warning(
                "Action %s exceeded threshold (%sms): took %.2fms", action_type, self.threshold_ms, elapsed_ms
            )
        elif self.log_all:
            logger.info("Action %s took %.2fms", action_type, elapsed_ms)

    def get_metrics(self) -> Dict[Any, Dict[str, float]]:
        """
        獲取性能指標統計信息。

        Returns:
            以 action 類型為鍵，包含 avg / max / min / count 的字典
        """
        result = {}
        for action_type, times in self.metrics.items():
            if not times:
                continue
            result[action_type] = {
                'avg': sum(times) / len(times),
                'max': max(times),
                'min': min(times),
                'count': len(times)
            }
        return result
