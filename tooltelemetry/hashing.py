import hashlib


def hash_identifier(identifier: str | None) -> str | None:
    """
    Obfuscates a project name (or similar identifier) for logging.

    Deterministic, so the collector can still group events by project
    without seeing the name itself. Not meant to withstand a dictionary
    attack.

    Returns:
        Hex SHA-256 digest of the UTF-8 identifier; None passes through.
    """
    if identifier is None:
        return None
    return hashlib.sha256(identifier.encode("utf-8")).hexdigest()
