"""
Material label resolution for fragments.

The live render material is the preferred source of a name, but many
exported models only carry generated names such as ``Unnamed_42``.  In
that case the element's own properties are searched for anything that
looks like a material.  Resolution never fails: missing information
degrades to ``"Unnamed Material"``.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence, Tuple

UNNAMED_PREFIX = "Unnamed"
UNNAMED_MATERIAL = "Unnamed Material"
MATERIAL_PROPERTY_HINT = "material"


def color_to_hex(color: Any) -> Optional[str]:
    """Return a six digit lowercase hex string for a colour, or ``None``.

    Accepted inputs are an integer ``0xRRGGBB``, a hex string with or
    without a leading ``#`` and a sequence of three floats in ``[0, 1]``.
    Anything else yields ``None``.
    """
    if color is None or isinstance(color, bool):
        return None
    if isinstance(color, int):
        return f"{color & 0xFFFFFF:06x}"
    if isinstance(color, str):
        text = color.strip().lstrip("#")
        if len(text) == 6:
            try:
                int(text, 16)
            except ValueError:
                return None
            return text.lower()
        return None
    try:
        r, g, b = (float(c) for c in color)
    except (TypeError, ValueError):
        return None
    channels = [max(0, min(255, int(round(c * 255)))) for c in (r, g, b)]
    return "".join(f"{c:02x}" for c in channels)


def _material_property(properties: Iterable[Tuple[str, Any]]) -> Optional[Tuple[str, Any]]:
    """Return the first property whose name mentions a material."""
    for prop in properties:
        if prop[0] and MATERIAL_PROPERTY_HINT in str(prop[0]).lower():
            return prop
    return None


def resolve_material(material: Any, properties: Optional[Sequence[Tuple[str, Any]]] = None) -> str:
    """Build a human readable material label for one fragment.

    Args:
        material: The fragment's live material object (exposing ``name``,
            ``id`` and ``color``) or ``None``.
        properties: The element's ``(displayName, displayValue)`` pairs.

    Returns:
        ``"<name> (ID: <id>) (Color: #<hex>)"`` when a live material is
        present (``(No ID)`` without an identifier, no colour suffix
        without a colour), otherwise the bare resolved name.
    """
    name = getattr(material, "name", None) if material is not None else None
    if (not name or str(name).startswith(UNNAMED_PREFIX)) and properties:
        prop = _material_property(properties)
        if prop is not None:
            # An empty value still replaces the generic name.
            name = prop[1]
    if not name:
        name = UNNAMED_MATERIAL

    if material is None:
        return str(name)

    material_id = getattr(material, "id", None)
    label = f"{name} (ID: {material_id})" if material_id else f"{name} (No ID)"
    hex_color = color_to_hex(getattr(material, "color", None))
    if hex_color is not None:
        label += f" (Color: #{hex_color})"
    return label
