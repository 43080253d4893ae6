"""Smart names and display names.

Helpers that turn per-language texts and smart-name annotations into the
display strings shown to consumers.
"""

from __future__ import annotations

from graph_bridge.core.models.control import SmartName
from graph_bridge.core.models.graph import GraphObject, TranslatedText, last_segment

UNNAMED = "Unnamed"


def translate(text: TranslatedText | None, language: str) -> str | None:
    """Pick the text for a language.

    Args:
        text: Plain string or mapping of language -> text
        language: Requested language

    Returns:
        Text in `language`, else English, else the first translation,
        or None if there is no text at all

    Examples:
        >>> translate({"de": "Küche", "en": "Kitchen"}, "fr")
        'Kitchen'
    """
    if text is None:
        return None
    if isinstance(text, str):
        return text or None
    value = text.get(language) or text.get("en")
    if value:
        return value
    for value in text.values():
        if value:
            return value
    return None


def display_name(text: TranslatedText | None, language: str, object_id: str) -> str:
    """Resolve a display name that is never empty.

    Falls back to the last segment of `object_id`, then to "Unnamed".
    """
    return translate(text, language) or last_segment(object_id) or UNNAMED


def smart_name_of(obj: GraphObject | None) -> SmartName:
    """Resolve the smart-name annotation of an object."""
    if obj is None:
        return SmartName()
    return SmartName.from_raw(obj.common.smart_name)


def group_names(smart_name: SmartName, language: str) -> list[str]:
    """Split a smart name into its comma-separated display names."""
    name = smart_name.display_name(language)
    if not name:
        return []
    return [part.strip() for part in name.split(",") if part.strip()]


def infer_smart_type(value_type: str | None) -> str:
    """Default smart type for an annotated object without an explicit one.

    Numbers become dimmers; booleans, mixed and everything else become
    power switches.
    """
    if value_type == "number":
        return "dimmer"
    return "power"
