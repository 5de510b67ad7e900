import pytest

from tooltelemetry.config import Settings
from tooltelemetry.schemas import (
    IMAGE_IMPORT_ACTION,
    ImageImportParams,
    InputParams,
    ToolLogEvent,
)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        TOOLTELEMETRY_CLIENT_TYPE="TEST_CLIENT",
        TOOLTELEMETRY_LOG_SOURCE=1234,
        TOOLTELEMETRY_DISABLED=False,
    )


@pytest.fixture
def image_import_event() -> ToolLogEvent:
    return ToolLogEvent(
        tool_action=IMAGE_IMPORT_ACTION,
        input_params=InputParams(image_import_params=ImageImportParams(image_name="disk1")),
    )
