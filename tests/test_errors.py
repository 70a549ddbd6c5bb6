import logging

import pytest

from pystorekit import (
    ActionError, ErrorHandler, MiddlewareError, PyStoreKitError, ReducerError, StoreError,
    ValidationError, global_error_handler, handle_error
)


def test_hierarchy_maps_to_builtin_categories():
    assert issubclass(ValidationError, TypeError)
    assert issubclass(ActionError, TypeError)
    assert issubclass(StoreError, RuntimeError)
    assert issubclass(MiddlewareError, RuntimeError)
    assert issubclass(ReducerError, RuntimeError)
    for cls in (ValidationError, ActionError, StoreError, MiddlewareError, ReducerError):
        assert issubclass(cls, PyStoreKitError)


def test_to_dict_carries_details():
    error = StoreError("Reducers may not dispatch actions.", operation="dispatch")

    data = error.to_dict()

    assert data["error_type"] == "StoreError"
    assert data["message"] == "Reducers may not dispatch actions."
    assert data["details"] == {"operation": "dispatch"}
    assert str(error) == "Reducers may not dispatch actions."


def test_error_handler_logs_and_notifies(caplog):
    handler = ErrorHandler(log_to_console=False)
    received = []
    handler.register_handler(lambda error, action: received.append((error, action)))
    error = ActionError("Actions must be plain objects.", action=42)

    with caplog.at_level(logging.ERROR, logger="pystorekit.errors"):
        handler.handle(error, 42)

    assert received == [(error, 42)]
    assert "ActionError: Actions must be plain objects." in caplog.text


def test_error_handler_logs_generic_errors(caplog):
    handler = ErrorHandler(log_to_console=False)

    with caplog.at_level(logging.ERROR, logger="pystorekit.errors"):
        handler.handle(ValueError("bad value"))

    assert "GenericError ValueError: bad value" in caplog.text


def test_error_handler_writes_log_file(tmp_path):
    log_file = tmp_path / "errors.log"
    handler = ErrorHandler(log_to_console=False, log_to_file=True, log_file=str(log_file))

    try:
        handler.handle(StoreError("gate is set", operation="get_state"))
    finally:
        handler.close()

    assert "StoreError: gate is set" in log_file.read_text(encoding="utf-8")


def test_console_handler_is_shared_between_handlers():
    first = ErrorHandler()
    second = ErrorHandler()

    try:
        for _ in range(3):
            first.handle(ValueError("first"))
            second.handle(ValueError("second"))
        stream_handlers = [
            h for h in first._logger.handlers
            if type(h) is logging.StreamHandler
        ]
        assert len(stream_handlers) == 1
    finally:
        first.close()
        second.close()

    assert not any(type(h) is logging.StreamHandler for h in first._logger.handlers)


def test_same_log_file_is_written_once_per_error(tmp_path):
    log_file = tmp_path / "errors.log"
    first = ErrorHandler(log_to_console=False, log_to_file=True, log_file=str(log_file))
    second = ErrorHandler(log_to_console=False, log_to_file=True, log_file=str(log_file))

    try:
        first.handle(StoreError("from first", operation="dispatch"))
        second.handle(StoreError("from second", operation="dispatch"))
        first.handle(StoreError("again", operation="dispatch"))
    finally:
        first.close()
        second.close()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 3
    assert not any(isinstance(h, logging.FileHandler) for h in first._logger.handlers)


def test_global_error_handler_does_not_log_to_console():
    assert global_error_handler.log_to_console is False


def test_handle_error_reports_and_reraises():
    received = []

    def callback(error, action):
        received.append(error)

    @handle_error
    def broken():
        raise ValueError("broken")

    global_error_handler.register_handler(callback)
    try:
        with pytest.raises(ValueError, match="broken"):
            broken()
    finally:
        global_error_handler.unregister_handler(callback)

    assert len(received) == 1
    assert isinstance(received[0], ValueError)
