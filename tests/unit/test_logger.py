"""Tests for logging helpers."""

from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer

from carteira import logger as logger_module


class RecordingLogger:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict]] = []

    def _record(self, level: str):
        def method(event: str, **kwargs) -> None:
            self.calls.append((level, event, kwargs))

        return method

    def __getattr__(self, name: str):
        return self._record(name)


def test_select_renderer_uses_console_in_debug(monkeypatch) -> None:
    monkeypatch.setattr(logger_module.settings, "debug", True)
    renderer = logger_module._select_renderer()
    assert isinstance(renderer, ConsoleRenderer)


def test_select_renderer_uses_json_in_production(monkeypatch) -> None:
    monkeypatch.setattr(logger_module.settings, "debug", False)
    renderer = logger_module._select_renderer()
    assert isinstance(renderer, JSONRenderer)


def test_log_timing_reports_duration_and_context() -> None:
    log = RecordingLogger()

    with logger_module.log_timing("group_totals", logger=log, level="debug", records=3) as ctx:
        ctx["groups"] = 1

    assert "duration_ms" in ctx
    level, event, kwargs = log.calls[0]
    assert level == "debug"
    assert event == "group_totals completed"
    assert kwargs["records"] == 3
    assert kwargs["groups"] == 1
    assert kwargs["duration_ms"] >= 0


async def test_async_log_timing_logs_on_exit() -> None:
    log = RecordingLogger()

    async with logger_module.async_log_timing("investment_table", logger=log):
        pass

    assert log.calls[0][1] == "investment_table completed"


def test_log_exception_includes_error_details() -> None:
    log = RecordingLogger()
    exc = RuntimeError("boom")

    logger_module.log_exception(log, exc, "Failed to create bank", name="Inter")

    level, event, kwargs = log.calls[0]
    assert level == "error"
    assert event == "Failed to create bank"
    assert kwargs["exc_info"] is exc
    assert kwargs["error"] == "boom"
    assert kwargs["error_type"] == "RuntimeError"
    assert kwargs["name"] == "Inter"


def test_log_exception_without_traceback() -> None:
    log = RecordingLogger()

    logger_module.log_exception(log, ValueError("bad"), "Rejected", level="warning", include_traceback=False)

    level, _, kwargs = log.calls[0]
    assert level == "warning"
    assert "exc_info" not in kwargs
