import json

import pytest

from tooltelemetry.envelope import (
    LogResponse,
    ResponseAction,
    build_log_request,
    parse_log_response,
)
from tooltelemetry.errors import InvalidLogResponseError
from tooltelemetry.patch import update_project
from tooltelemetry.schemas import ToolLogEvent


def test_build_log_request(settings, image_import_event):
    image_import_event.elapsed_time_ms = 350
    image_import_event.event_time_ms = 1700000000350
    update_project(image_import_event, "proj-42")

    request = build_log_request([image_import_event], settings=settings, request_time_ms=1700000000400)

    assert request.client_info.client_type == "TEST_CLIENT"
    assert request.log_source == 1234
    assert request.request_time_ms == 1700000000400
    assert len(request.log_event) == 1
    log_event = request.log_event[0]
    assert log_event.event_time_ms == 1700000000350
    assert log_event.event_uptime_ms == 350
    assert json.loads(log_event.source_extension_json) == image_import_event.to_wire()


def test_log_request_wire_shape(settings):
    events = [ToolLogEvent(tool_action="ImageExport"), ToolLogEvent(tool_action="ImageImport")]

    body = json.loads(build_log_request(events, settings=settings).to_json())

    assert set(body) == {"client_info", "log_source", "request_time_ms", "log_event"}
    assert body["client_info"] == {"client_type": "TEST_CLIENT"}
    assert body["request_time_ms"] > 0
    assert [json.loads(e["source_extension_json"])["tool_action"] for e in body["log_event"]] == [
        "ImageExport",
        "ImageImport",
    ]
    assert set(body["log_event"][0]) == {"event_time_ms", "event_uptime_ms", "source_extension_json"}


def test_parse_log_response():
    response = parse_log_response(
        '{"NextRequestWaitMillis": "1500",'
        ' "LogResponseDetails": [{"ResponseAction": "RETRY_REQUEST_LATER"}]}'
    )

    assert response.next_request_wait_millis == 1500
    assert [d.response_action for d in response.log_response_details] == [
        ResponseAction.RETRY_REQUEST_LATER
    ]


@pytest.mark.parametrize(
    "action,expected",
    [
        ("DELETE_REQUEST", ResponseAction.DELETE_REQUEST),
        ("RESPONSE_ACTION_UNKNOWN", ResponseAction.RESPONSE_ACTION_UNKNOWN),
        ("SOME_NEWER_ACTION", ResponseAction.RESPONSE_ACTION_UNKNOWN),
    ],
)
def test_response_actions(action, expected):
    response = parse_log_response(
        json.dumps({"NextRequestWaitMillis": "0", "LogResponseDetails": [{"ResponseAction": action}]})
    )

    assert response.log_response_details[0].response_action is expected


def test_response_wait_is_sent_as_string():
    response = LogResponse(NextRequestWaitMillis=2500)

    assert json.loads(response.to_json()) == {
        "NextRequestWaitMillis": "2500",
        "LogResponseDetails": [],
    }


@pytest.mark.parametrize(
    "body",
    [
        "not json",
        "{}",
        '{"NextRequestWaitMillis": "soon"}',
        '{"NextRequestWaitMillis": "1", "LogResponseDetails": [{}]}',
    ],
)
def test_invalid_response(body):
    with pytest.raises(InvalidLogResponseError):
        parse_log_response(body)
