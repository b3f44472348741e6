"""Component tag attribute parsing."""

import re

from aurynx.compiler.ast_nodes import AttributeMap

BIND_MARKER = ":"

_ATTRIBUTE_PATTERN = re.compile(
    r"""(:?[a-zA-Z0-9_][a-zA-Z0-9_.:-]*)"""  # name, optional leading bind marker
    r"""(?:\s*=\s*(?:"([^"]*)"|'([^']*)'))?"""
)


def parse_attributes(source: str) -> AttributeMap:
    """Parse the raw attribute string of a component tag.

    Supports ``name``, ``name="value"`` and ``name='value'``. Valueless
    attributes map to ``True``. Bound attributes keep their leading ``:`` so
    callers can tell static values from expressions. Later duplicates win;
    anything that does not look like an attribute is skipped.
    """
    attributes: AttributeMap = {}
    if not source:
        return attributes

    for match in _ATTRIBUTE_PATTERN.finditer(source):
        name, double_quoted, single_quoted = match.groups()
        if double_quoted is not None:
            attributes[name] = double_quoted
        elif single_quoted is not None:
            attributes[name] = single_quoted
        else:
            attributes[name] = True

    return attributes


def is_bound(name: str) -> bool:
    return name.startswith(BIND_MARKER)


def prop_name(name: str) -> str:
    """Strip the bind marker from an attribute name."""
    return name[len(BIND_MARKER) :] if is_bound(name) else name
