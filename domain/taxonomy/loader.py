"""Parse taxonomy fixup configuration from a YAML dict."""

from typing import Any

from domain.taxonomy.fixups import TextFixup


def parse_fixups_config(data: dict[str, Any]) -> list[TextFixup]:
    """
    Parse a pre-loaded YAML dict into an ordered list of text fixups.

    This is a pure function - it does NOT perform file I/O.
    The YAML loading happens in infrastructure.config.loader.

    Args:
        data: Dictionary from yaml.safe_load() with a `fixups` list

    Returns:
        Fixups in file order

    Raises:
        ValueError: If `fixups` is not a list of mappings or a rule is invalid
    """
    raw = data.get("fixups", []) or []
    if not isinstance(raw, list):
        raise ValueError("fixups must be a list")

    fixups: list[TextFixup] = []
    for i, item in enumerate(raw, start=1):
        if not isinstance(item, dict):
            raise ValueError(f"fixup #{i} must be a mapping, got {type(item).__name__}")
        fixups.append(TextFixup(**item))
    return fixups
