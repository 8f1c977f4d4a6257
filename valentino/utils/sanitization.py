import html
from typing import Any, Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Escape HTML special characters so user input can be embedded in email markup.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(value, quote=True)


def sanitize_attributes(obj: Any, fields: list[str]) -> dict[str, Optional[str]]:
    """
    Read the given attributes off an object (ORM row or schema) and escape them.

    Args:
        obj: Any object exposing the attributes
        fields: Attribute names to read

    Returns:
        Dict of field name to escaped value
    """
    return {field: sanitize_string(getattr(obj, field, None)) for field in fields}
