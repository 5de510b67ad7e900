"""
Telemetry events for the image and instance import/export tools.

Models the event each tool invocation logs, back-fills the project into it
once known, and wraps events into requests for the log collection endpoint.
"""

from tooltelemetry.envelope import (
    LogRequest,
    LogResponse,
    ResponseAction,
    build_log_request,
    parse_log_response,
)
from tooltelemetry.errors import InvalidLogResponseError, TelemetryError, ToolError
from tooltelemetry.hashing import hash_identifier
from tooltelemetry.patch import update_project
from tooltelemetry.recorder import ToolLogger
from tooltelemetry.schemas import (
    CommonParams,
    ImageExportParams,
    ImageImportParams,
    InputParams,
    InspectionResults,
    InstanceExportParams,
    InstanceImportParams,
    MachineImageExportParams,
    MachineImageImportParams,
    OnestepImageImportParams,
    OutputInfo,
    ToolLogEvent,
    WindowsUpgradeParams,
)

__all__ = [
    "CommonParams",
    "ImageExportParams",
    "ImageImportParams",
    "InputParams",
    "InspectionResults",
    "InstanceExportParams",
    "InstanceImportParams",
    "InvalidLogResponseError",
    "LogRequest",
    "LogResponse",
    "MachineImageExportParams",
    "MachineImageImportParams",
    "OnestepImageImportParams",
    "OutputInfo",
    "ResponseAction",
    "TelemetryError",
    "ToolError",
    "ToolLogEvent",
    "ToolLogger",
    "WindowsUpgradeParams",
    "build_log_request",
    "hash_identifier",
    "parse_log_response",
    "update_project",
]
