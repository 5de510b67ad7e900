import copy
import threading
import uuid
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
    model_validator,
)

# Tool actions, one per InputParams variant
IMAGE_IMPORT_ACTION = "ImageImport"
IMAGE_EXPORT_ACTION = "ImageExport"
INSTANCE_IMPORT_ACTION = "InstanceImport"
MACHINE_IMAGE_IMPORT_ACTION = "MachineImageImport"
WINDOWS_UPGRADE_ACTION = "WindowsUpgrade"
ONESTEP_IMAGE_IMPORT_ACTION = "OneStepImageImport"
INSTANCE_EXPORT_ACTION = "InstanceExport"
MACHINE_IMAGE_EXPORT_ACTION = "MachineImageExport"

STATUS_START = "Start"
STATUS_SUCCESS = "Success"
STATUS_FAILURE = "Failure"


class WireModel(BaseModel):
    """Base for records sent to the log collection endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def to_wire(self) -> dict[str, Any]:
        """Dump using wire field names, leaving out every absent field."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CommonParams(WireModel):
    """Params shared by every tool; flattened into the tool's params on the wire."""

    client_id: str | None = None
    client_version: str | None = None
    network: str | None = None
    subnet: str | None = None
    zone: str | None = None
    timeout: str | None = None
    project: str | None = None
    obfuscated_project: str | None = None  # Always hash_identifier(project)
    labels: str | None = None
    scratch_bucket_gcs_path: str | None = None
    oauth: str | None = None
    compute_endpoint_override: str | None = None
    disable_gcs_logging: bool = False
    disable_cloud_logging: bool = False
    disable_stdout_logging: bool = False


class ToolParams(WireModel):
    """
    Base for the per-tool params records.

    The shared fields live in a composed ``common_params`` record. The
    collector expects them side by side with the tool-specific fields, so
    they are flattened on dump and gathered back on parse.
    """

    common_params: CommonParams = Field(default_factory=CommonParams)

    @model_validator(mode="before")
    @classmethod
    def _gather_common_params(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "common_params" in data:
            return data
        common = {k: v for k, v in data.items() if k in CommonParams.model_fields}
        rest = {k: v for k, v in data.items() if k not in common}
        rest["common_params"] = common
        return rest

    @model_serializer(mode="wrap")
    def _flatten_common_params(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        common = data.pop("common_params", None) or {}
        return {**common, **data}


class InspectionResults(WireModel):
    """Metadata determined by automated inspection of an imported disk."""

    bios_bootable: bool | None = None
    uefi_bootable: bool | None = None
    # File system type of the partition containing "/"
    root_fs: str | None = None


class ImageImportParams(ToolParams):
    image_name: str | None = None
    data_disk: bool = False
    os: str | None = None
    source_file: str | None = None
    source_image: str | None = None
    no_guest_environment: bool = False
    family: str | None = None
    description: str | None = None
    no_external_ip: bool = False
    has_kms_key: bool = False
    has_kms_keyring: bool = False
    has_kms_location: bool = False
    has_kms_project: bool = False
    storage_location: str | None = None
    inspection_results: InspectionResults | None = None
    compute_service_account: str | None = None


class ImageExportParams(ToolParams):
    destination_uri: str | None = None
    source_image: str | None = None
    format: str | None = None
    compute_service_account: str | None = None
    source_disk_snapshot: str | None = None


class OnestepImageImportParams(ToolParams):
    image_name: str | None = None
    os: str | None = None
    no_guest_environment: bool = False
    family: str | None = None
    description: str | None = None
    no_external_ip: bool = False
    has_kms_key: bool = False
    has_kms_keyring: bool = False
    has_kms_location: bool = False
    has_kms_project: bool = False
    storage_location: str | None = None
    compute_service_account: str | None = None

    # AWS source
    aws_ami_id: str | None = None
    aws_ami_export_location: str | None = None
    aws_source_ami_file_path: str | None = None


class InstanceImportParams(ToolParams):
    instance_name: str | None = None
    ovf_gcs_path: str | None = None
    can_ip_forward: bool = False
    deletion_protection: bool = False
    machine_type: str | None = None
    network_interface: str | None = None
    network_tier: str | None = None
    private_network_ip: str | None = None
    no_external_ip: bool | None = None
    no_restart_on_failure: bool = False
    os: str | None = None
    shielded_integrity_monitoring: bool = False
    shielded_secure_boot: bool = False
    shielded_vtpm: bool = False
    tags: str | None = None
    has_boot_disk_kms_key: bool = False
    has_boot_disk_kms_keyring: bool = False
    has_boot_disk_kms_location: bool = False
    has_boot_disk_kms_project: bool = False
    no_guest_environment: bool = False
    node_affinity_label: str | None = None
    compute_service_account: str | None = None


class MachineImageImportParams(ToolParams):
    machine_image_name: str | None = None
    ovf_gcs_path: str | None = None
    can_ip_forward: bool = False
    deletion_protection: bool = False
    machine_type: str | None = None
    network_interface: str | None = None
    network_tier: str | None = None
    private_network_ip: str | None = None
    no_external_ip: bool | None = None
    no_restart_on_failure: bool = False
    os: str | None = None
    shielded_integrity_monitoring: bool = False
    shielded_secure_boot: bool = False
    shielded_vtpm: bool = False
    tags: str | None = None
    has_boot_disk_kms_key: bool = False
    has_boot_disk_kms_keyring: bool = False
    has_boot_disk_kms_location: bool = False
    has_boot_disk_kms_project: bool = False
    no_guest_environment: bool = False
    node_affinity_label: str | None = None
    hostname: str | None = None
    machine_image_storage_location: str | None = None
    compute_service_account: str | None = None


class WindowsUpgradeParams(ToolParams):
    source_os: str | None = None
    target_os: str | None = None
    instance: str | None = None
    create_machine_backup: bool = False
    auto_rollback: bool = False
    use_staging_install_media: bool = False


class InstanceExportParams(ToolParams):
    destination_uri: str | None = None
    instance_name: str | None = None
    ovf_format: str | None = None
    disk_export_format: str | None = None
    no_external_ip: bool | None = None
    os: str | None = None


class MachineImageExportParams(ToolParams):
    destination_uri: str | None = None
    machine_image_name: str | None = None
    ovf_format: str | None = None
    disk_export_format: str | None = None
    no_external_ip: bool | None = None
    os: str | None = None


class InputParams(WireModel):
    """
    Union of the params of every tool. Callers populate exactly one field;
    nothing enforces it.
    """

    image_import_params: ImageImportParams | None = Field(
        default=None, alias="image_import_input_params"
    )
    image_export_params: ImageExportParams | None = Field(
        default=None, alias="image_export_input_params"
    )
    instance_import_params: InstanceImportParams | None = Field(
        default=None, alias="instance_import_input_params"
    )
    machine_image_import_params: MachineImageImportParams | None = Field(
        default=None, alias="machine_image_import_input_params"
    )
    windows_upgrade_params: WindowsUpgradeParams | None = Field(
        default=None, alias="windows_upgrade_input_params"
    )
    onestep_image_import_params: OnestepImageImportParams | None = Field(
        default=None, alias="onestep_image_import_input_params"
    )
    instance_export_params: InstanceExportParams | None = Field(
        default=None, alias="instance_export_input_params"
    )
    machine_image_export_params: MachineImageExportParams | None = Field(
        default=None, alias="machine_image_export_input_params"
    )

    def populated_variants(self) -> list[tuple[str, ToolParams]]:
        """Returns (field name, params) for every populated field, in declaration order."""
        variants: list[tuple[str, ToolParams]] = []
        for name in type(self).model_fields:
            value = getattr(self, name)
            if value is not None:
                variants.append((name, value))
        return variants


class OutputInfo(WireModel):
    """Output values of a tool run. Written once, when the run completes."""

    # Size of import/export sources (image or file)
    sources_size_gb: list[int] | None = None
    # Size of import/export targets (image or file)
    targets_size_gb: list[int] | None = None
    failure_message: str | None = None
    failure_message_without_privacy_info: str | None = None
    # Actual format of the imported file
    import_file_format: str | None = None
    # Serial output from worker instances; only populated on failure
    serial_outputs: list[str] | None = None
    # qemu, API, etc.
    inflation_type: str | None = None
    inflation_time_ms: list[int] | None = None
    shadow_inflation_time_ms: list[int] | None = None
    shadow_disk_match_result: str | None = None
    # UEFI_COMPATIBLE was added to the image's guestOSFeatures
    is_uefi_compatible_image: bool | None = None
    # The image was auto-detected to be UEFI compatible
    is_uefi_detected: bool | None = None


class ToolLogEvent(WireModel):
    """One log line describing a single tool invocation."""

    # Random id correlating the log lines of a single invocation
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), frozen=True)
    cloud_build_id: str | None = None
    tool_action: str = ""
    status: str = ""
    elapsed_time_ms: int = 0
    event_time_ms: int = 0
    input_params: InputParams | None = None
    output_info: OutputInfo | None = None

    _params_lock = PrivateAttr(default_factory=threading.Lock)

    @field_validator("input_params")
    @classmethod
    def _own_input_params(cls, value: InputParams | None) -> InputParams | None:
        # Each event patches its own copy under its own lock
        return None if value is None else value.model_copy(deep=True)

    def __deepcopy__(self, memo: dict[int, Any] | None = None) -> "ToolLogEvent":
        with self._params_lock:
            data = {name: copy.deepcopy(getattr(self, name), memo) for name in type(self).model_fields}
        # model_construct gives the copy a fresh lock
        return type(self).model_construct(_fields_set=set(self.model_fields_set), **data)

    @property
    def params_lock(self) -> threading.Lock:
        """Guards input_params against concurrent patching."""
        return self._params_lock

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, data: str | bytes) -> "ToolLogEvent":
        return cls.model_validate_json(data)
