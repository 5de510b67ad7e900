"""
Request and response envelopes exchanged with the log collection endpoint.

The request wraps serialized tool events; the response tells the sender
when it may send again and what to do with the request it just sent.
"""

import logging
import time
from collections.abc import Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_serializer, field_validator

from tooltelemetry.config import Settings, settings as default_settings
from tooltelemetry.errors import InvalidLogResponseError
from tooltelemetry.schemas import ToolLogEvent

logger = logging.getLogger(__name__)


class ClientInfo(BaseModel):
    # Which client library is sending
    client_type: str


class LogEvent(BaseModel):
    event_time_ms: int
    event_uptime_ms: int
    source_extension_json: str


class LogRequest(BaseModel):
    client_info: ClientInfo
    log_source: int
    request_time_ms: int
    log_event: list[LogEvent]

    def to_json(self) -> str:
        return self.model_dump_json()


class ResponseAction(str, Enum):
    # Delete the request rather than retry: the server may have added an
    # action this client does not understand, and retrying could loop forever.
    RESPONSE_ACTION_UNKNOWN = "RESPONSE_ACTION_UNKNOWN"
    # Retry later, via normal scheduling.
    RETRY_REQUEST_LATER = "RETRY_REQUEST_LATER"
    # Delete the request; sent for successful and non-retryable requests.
    DELETE_REQUEST = "DELETE_REQUEST"


class LogResponseDetails(BaseModel):
    response_action: ResponseAction = Field(alias="ResponseAction")

    @field_validator("response_action", mode="before")
    @classmethod
    def _unknown_action(cls, value: Any) -> Any:
        if isinstance(value, str) and value not in {a.value for a in ResponseAction}:
            logger.warning(f"Unrecognized response action {value!r}, treating as unknown")
            return ResponseAction.RESPONSE_ACTION_UNKNOWN
        return value


class LogResponse(BaseModel):
    # Sent as a string-encoded integer
    next_request_wait_millis: int = Field(alias="NextRequestWaitMillis")
    log_response_details: list[LogResponseDetails] = Field(
        default_factory=list, alias="LogResponseDetails"
    )

    @field_serializer("next_request_wait_millis")
    def _wait_as_string(self, value: int) -> str:
        return str(value)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


def _now_ms() -> int:
    return int(time.time() * 1000)


def build_log_request(
    events: Iterable[ToolLogEvent],
    settings: Settings | None = None,
    request_time_ms: int | None = None,
) -> LogRequest:
    """
    Wraps events into a request for the log collection endpoint.

    Each event is serialized while holding its params lock, so a concurrent
    project update is either fully in the line or not at all.

    Args:
        events: Events to send, in order.
        settings: Overrides the module settings.
        request_time_ms: Epoch millis of the request; defaults to now.
    """
    settings = settings or default_settings
    log_events: list[LogEvent] = []
    for event in events:
        with event.params_lock:
            source_extension_json = event.to_json()
        log_events.append(
            LogEvent(
                event_time_ms=event.event_time_ms,
                event_uptime_ms=event.elapsed_time_ms,
                source_extension_json=source_extension_json,
            )
        )

    return LogRequest(
        client_info=ClientInfo(client_type=settings.TOOLTELEMETRY_CLIENT_TYPE),
        log_source=settings.TOOLTELEMETRY_LOG_SOURCE,
        request_time_ms=_now_ms() if request_time_ms is None else request_time_ms,
        log_event=log_events,
    )


def parse_log_response(body: str | bytes) -> LogResponse:
    """
    Parses the endpoint's response body.

    Raises:
        InvalidLogResponseError: If the body is not JSON or does not match
            the response schema.
    """
    try:
        return LogResponse.model_validate_json(body)
    except ValidationError as ve:
        raise InvalidLogResponseError(f"Invalid log response: {ve}") from ve
