import logging

from tooltelemetry.hashing import hash_identifier
from tooltelemetry.schemas import ToolLogEvent

logger = logging.getLogger(__name__)


def update_project(event: ToolLogEvent, project: str | None) -> None:
    """
    Back-fills the project, and its obfuscated form, into the event's params.

    The project is often only known once the tool has resolved its target,
    well after the event was created. Every populated params variant is
    patched, so an event that breaks the one-variant convention still stays
    consistent.

    A missing or empty project is a no-op and never clears earlier values.
    Safe to call from several threads on the same event; serializing the
    event concurrently requires holding ``event.params_lock``.

    Args:
        event: The event to patch in place.
        project: The project the tool runs against, if known.
    """
    if not project:
        return

    obfuscated_project = hash_identifier(project)

    with event.params_lock:
        if event.input_params is None:
            return

        patched: list[str] = []
        for name, params in event.input_params.populated_variants():
            # Swap in a new record so both fields change in one assignment
            params.common_params = params.common_params.model_copy(
                update={"project": project, "obfuscated_project": obfuscated_project}
            )
            patched.append(name)

    if len(patched) > 1:
        logger.warning(
            f"Event {event.id} has {len(patched)} params variants populated: {patched}"
        )
    if patched:
        logger.debug(f"Updated project on event {event.id} for {patched}")
