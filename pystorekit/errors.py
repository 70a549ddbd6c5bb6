"""
PyStoreKit 錯誤處理模組。

定義所有 PyStoreKit 異常的層級結構，以及集中式的錯誤處理器。
核心模組在違規點立即拋出這些異常，不在內部吞掉；
ErrorHandler 只負責記錄與轉發給註冊的回調。
"""

import functools
import logging
import os
import traceback
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union, cast

T = TypeVar("T")


class PyStoreKitError(Exception):
    """所有 PyStoreKit 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.traceback = "".join(traceback.format_stack()[:-1])

    def to_dict(self) -> Dict[str, Any]:
        """
        轉為可序列化的字典，供錯誤報告使用。

        Returns:
            包含錯誤類型、訊息、細節與堆疊的字典
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": dict(self.details),
            "traceback": self.traceback,
        }

    def __str__(self) -> str:
        return self.message


class ValidationError(PyStoreKitError, TypeError):
    """參數驗證錯誤，例如 reducer、enhancer 或 listener 不是可呼叫物件。"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        expected_type: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        details = {"field": field, "value": repr(value), "expected_type": expected_type}
        details.update(kwargs)
        super().__init__(message, details)
        self.field = field


class ActionError(PyStoreKitError, TypeError):
    """與 Action 相關的錯誤：不是 plain object，或缺少 type。"""

    def __init__(self, message: str, action: Any = None, **kwargs: Any) -> None:
        details = {"action": repr(action)}
        details.update(kwargs)
        super().__init__(message, details)


class StoreError(PyStoreKitError, RuntimeError):
    """與 Store 相關的錯誤，主要是 reducer 執行期間的重入操作。"""

    def __init__(self, message: str, operation: str, **kwargs: Any) -> None:
        details = {"operation": operation}
        details.update(kwargs)
        super().__init__(message, details)
        self.operation = operation


class ReducerError(PyStoreKitError, RuntimeError):
    """與 Reducer 組合相關的錯誤。"""

    def __init__(self, message: str, reducer_name: str, action_type: Any = None, **kwargs: Any) -> None:
        details = {"reducer_name": reducer_name, "action_type": action_type}
        details.update(kwargs)
        super().__init__(message, details)
        self.reducer_name = reducer_name


class MiddlewareError(PyStoreKitError, RuntimeError):
    """與 Middleware 相關的錯誤。"""

    def __init__(self, message: str, middleware_name: Optional[str] = None, **kwargs: Any) -> None:
        details = {"middleware_name": middleware_name}
        details.update(kwargs)
        super().__init__(message, details)


logger = logging.getLogger("pystorekit.errors")
# 函式庫本身不輸出任何東西，除非使用者要求
logger.addHandler(logging.NullHandler())

_formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
# 所有 ErrorHandler 共用同一個 console handler，避免重複輸出
_console_handler = logging.StreamHandler()
_console_handler.setFormatter(_formatter)


class ErrorHandler:
    """
    集中式錯誤處理器，用於日誌記錄和錯誤報告。

    處理器本身不吞掉異常：呼叫端記錄後仍應重新拋出。
    console 與檔案輸出只在第一次 handle 時掛上 pystorekit.errors logger，
    已經掛上的相同輸出不會重複添加；close() 移除本實例添加的 handler。
    """

    def __init__(
        self,
        log_to_console: bool = True,
        log_to_file: bool = False,
        log_file: Optional[str] = None
    ) -> None:
        """
        Args:
            log_to_console: 是否把錯誤輸出到 stderr
            log_to_file: 是否把錯誤寫入檔案
            log_file: 日誌檔案路徑，log_to_file 為 True 時使用
        """
        self.log_to_console = log_to_console
        self.log_to_file = log_to_file
        self.log_file = log_file or "pystorekit_errors.log"
        self.handlers: List[Callable[..., None]] = []
        self._logger = logger
        self._added_handlers: List[logging.Handler] = []
        self._configured = False

    def _attach(self, handler: logging.Handler) -> None:
        self._logger.addHandler(handler)
        self._added_handlers.append(handler)

    def _configure_logger(self) -> None:
        if self._configured:
            return
        self._configured = True
        if self.log_to_console and _console_handler not in self._logger.handlers:
            self._attach(_console_handler)
        if self.log_to_file:
            path = os.path.abspath(self.log_file)
            attached = any(
                isinstance(h, logging.FileHandler) and h.baseFilename == path
                for h in self._logger.handlers
            )
            if not attached:
                file_handler = logging.FileHandler(path, encoding="utf-8")
                file_handler.setFormatter(_formatter)
                self._attach(file_handler)

    def close(self) -> None:
        """移除本實例添加到 logger 的 handler。"""
        for handler in self._added_handlers:
            self._logger.removeHandler(handler)
            if handler is not _console_handler:
                handler.close()
        self._added_handlers.clear()
        self._configured = False

    def register_handler(self, handler: Callable[..., None]) -> None:
        """
        註冊錯誤回調，回調會以 (error, action) 呼叫。

        Args:
            handler: 接收錯誤與觸發它的 action（可能為 None）的函數
        """
        self.handlers.append(handler)

    def unregister_handler(self, handler: Callable[..., None]) -> None:
        if handler in self.handlers:
            self.handlers.remove(handler)

    def handle(self, error: Union[PyStoreKitError, Exception], action: Any = None) -> None:
        """
        記錄錯誤並通知所有註冊的回調。

        非 PyStoreKitError 的異常以 GenericError 的形式記錄。
        """
        self._configure_logger()
        if isinstance(error, PyStoreKitError):
            self._logger.error("%s: %s %s", error.__class__.__name__, error.message, error.details)
        else:
            self._logger.error("GenericError %s: %s", error.__class__.__name__, error)

        for handler in list(self.handlers):
            handler(error, action)


# 單例錯誤處理器；預設不輸出到 console，由使用者自行設定 logging
global_error_handler = ErrorHandler(log_to_console=False)


def handle_error(func: Callable[..., T]) -> Callable[..., T]:
    """
    裝飾器：把函數拋出的異常交給 global_error_handler 記錄後重新拋出。
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return func(*args, **kwargs)
        except Exception as err:
            global_error_handler.handle(err)
            raise
    return cast(Callable[..., T], wrapper)
