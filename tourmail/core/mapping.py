"""Build template bindings from a source document using a trigger's data mapping."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .render import has_tokens, render


def build_bindings(document: Mapping[str, Any], data_mapping: Mapping[str, str]) -> dict[str, Any]:
    """
    For each (variable, source) pair:
      - source containing {{...}} is rendered against the whole document
      - otherwise source is a field name, read verbatim ("" when absent or None)
    """
    bindings: dict[str, Any] = {}
    for variable, source in data_mapping.items():
        if has_tokens(source):
            bindings[variable] = render(source, document)
        else:
            value = document.get(source)
            bindings[variable] = "" if value is None else value
    return bindings
