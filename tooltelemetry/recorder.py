import logging
import time
from collections.abc import Callable

from tooltelemetry.config import Settings, settings as default_settings
from tooltelemetry.envelope import LogRequest, build_log_request
from tooltelemetry.errors import ToolError
from tooltelemetry.patch import update_project
from tooltelemetry.schemas import (
    STATUS_FAILURE,
    STATUS_START,
    STATUS_SUCCESS,
    InputParams,
    OutputInfo,
    ToolLogEvent,
)

logger = logging.getLogger(__name__)

LogSink = Callable[[LogRequest], None]


def _log_sink(request: LogRequest) -> None:
    """Default sink: writes the request to the debug log instead of sending it."""
    logger.debug(f"Tool log request: {request.to_json()}")


def _failure_output_info(error: Exception) -> OutputInfo:
    if isinstance(error, ToolError):
        return OutputInfo(
            failure_message=error.message,
            failure_message_without_privacy_info=error.anonymized_message,
        )
    return OutputInfo(
        failure_message=str(error),
        failure_message_without_privacy_info=type(error).__name__,
    )


class ToolLogger:
    """
    Records one tool invocation as a pair of log lines.

    A ``Start`` line is emitted before the tool runs and a ``Success`` or
    ``Failure`` line once it returns; both share the event id.
    """

    def __init__(
        self,
        tool_action: str,
        params: InputParams | None = None,
        sink: LogSink | None = None,
        settings: Settings | None = None,
        cloud_build_id: str | None = None,
    ):
        self.settings = settings or default_settings
        self.sink = sink or _log_sink
        self.event = ToolLogEvent(
            tool_action=tool_action,
            input_params=params,
            cloud_build_id=cloud_build_id,
        )
        self._start_time_s = time.monotonic()

    def update_project(self, project: str | None) -> None:
        """Fills in the project once the tool has resolved it. See patch.update_project."""
        update_project(self.event, project)

    def run(self, func: Callable[[], OutputInfo | None]) -> OutputInfo | None:
        """
        Runs the tool and logs its outcome.

        Args:
            func: The tool body. Returns the run's output info, if any.

        Returns:
            Whatever func returned.

        Raises:
            Whatever func raised, after the failure line is emitted.
        """
        if self.settings.TOOLTELEMETRY_DISABLED:
            return func()

        self._start_time_s = time.monotonic()
        self._emit(STATUS_START)

        status = STATUS_FAILURE
        output_info: OutputInfo | None = None
        try:
            output_info = func()
            status = STATUS_SUCCESS
            return output_info
        except Exception as e:
            output_info = _failure_output_info(e)
            raise
        finally:
            self.event.output_info = output_info
            self._emit(status)

    def _emit(self, status: str) -> None:
        self.event.status = status
        self.event.elapsed_time_ms = int((time.monotonic() - self._start_time_s) * 1000)
        self.event.event_time_ms = int(time.time() * 1000)

        request = build_log_request([self.event], settings=self.settings)
        try:
            self.sink(request)
            logger.debug(f"{status} line for {self.event.tool_action} ({self.event.id}) handed to sink")
        except Exception as e:
            logger.error(
                f"Failed to send {status} line for {self.event.tool_action} ({self.event.id}) - {e}",
                exc_info=True,
            )
