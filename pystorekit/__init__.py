"""
PyStoreKit：同步、單向資料流的狀態容器。
"""

from .errors import (
    PyStoreKitError, ActionError, ReducerError, StoreError, MiddlewareError,
    ValidationError, ErrorHandler, global_error_handler, handle_error
)
from .actions import Action, ActionTypes, create_action, is_plain_object
from .compose import compose
from .store import Store, create_store
from .apply_middleware import EnhancedStore, MiddlewareAPI, apply_middleware
from .reducers import combine_reducers, create_reducer, on
from .middleware import (
    BaseMiddleware, LoggerMiddleware, ThunkMiddleware, ErrorMiddleware,
    PerformanceMonitorMiddleware, global_error
)

__version__ = "0.1.0"

# 匯出所有公開 API
__all__ = [
    # Errors
    "PyStoreKitError", "ActionError", "ReducerError", "StoreError",
    "MiddlewareError", "ValidationError", "ErrorHandler", "global_error_handler",
    "handle_error",

    # Actions
    "Action", "ActionTypes", "create_action", "is_plain_object",

    # Store
    "Store", "create_store", "compose",
    "EnhancedStore", "MiddlewareAPI", "apply_middleware",

    # Reducers
    "create_reducer", "on", "combine_reducers",

    # Middleware
    "BaseMiddleware", "LoggerMiddleware", "ThunkMiddleware", "ErrorMiddleware",
    "PerformanceMonitorMiddleware", "global_error",
]
