"""WiX Source template rendering for wixbuild.

This module renders the authoring-source template: a WiX Source (wxs)
document with ``{{name}}`` placeholders that are filled from the resolved
template context (product name, manufacturer, ...).

Placeholders:
    - ``{{name}}`` where name is lowercase letters, digits and hyphens
    - Values are XML-escaped before substitution
    - ``{{replace-with-a-guid}}`` is reserved for GUIDs the user supplies by
      hand; it is passed through unchanged and never reported as missing

Design Principles:
    - Rendering is a pure function of (template, context)
    - Placeholders with no value are an error, never rendered blank
    - Context entries the template does not use are ignored
    - WiX preprocessor variables ($(var.Version)) are left alone; the
      compiler resolves them at build time

Example:
    from wixbuild.build.template import load_default_template, render

    text = render(load_default_template(), {
        "product-name": "Example",
        "manufacturer": "Example Inc.",
        "description": "An example",
        "binary-name": "example",
        "version": "1.0.0",
    })
"""

from __future__ import annotations

from importlib import resources
import re
from typing import Mapping

from wixbuild.exceptions import UnresolvedPlaceholder

GUID_PLACEHOLDER = "replace-with-a-guid"
RESERVED_TOKENS = frozenset({GUID_PLACEHOLDER})

DEFAULT_TEMPLATE = "main.wxs"

_PLACEHOLDER = re.compile(r"\{\{([a-z][a-z0-9-]*)\}\}")

_XML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}


def _escape_xml(value: str) -> str:
    """Escape a value for use in XML text or attribute content.

    Example:
        >>> _escape_xml("Tom & Jerry's")
        'Tom &amp; Jerry&apos;s'
    """
    return "".join(_XML_ESCAPES.get(ch, ch) for ch in value)


def placeholders(template_text: str) -> list[str]:
    """Return placeholder names in document order, without duplicates.

    Reserved tokens are not included.
    """
    seen: dict[str, None] = {}
    for match in _PLACEHOLDER.finditer(template_text):
        name = match.group(1)
        if name not in RESERVED_TOKENS:
            seen.setdefault(name, None)
    return list(seen)


def find_reserved(text: str) -> int:
    """Count reserved tokens left in a (rendered) document."""
    return sum(
        1 for match in _PLACEHOLDER.finditer(text) if match.group(1) in RESERVED_TOKENS
    )


def render(template_text: str, context: Mapping[str, str]) -> str:
    """Render a template by substituting placeholders from 'context'.

    Args:
        template_text: Template document.
        context: Placeholder name to value mappings.

    Returns:
        Rendered document text.

    Raises:
        UnresolvedPlaceholder: For the first placeholder (in document order)
            with no entry in 'context'.
    """
    for name in placeholders(template_text):
        if name not in context:
            raise UnresolvedPlaceholder(name)

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in RESERVED_TOKENS:
            return match.group(0)
        return _escape_xml(str(context[name]))

    return _PLACEHOLDER.sub(_substitute, template_text)


def load_default_template() -> str:
    """Read the WiX Source template embedded in the package."""
    return (
        resources.files("wixbuild.templates")
        .joinpath(DEFAULT_TEMPLATE)
        .read_text(encoding="utf-8")
    )
