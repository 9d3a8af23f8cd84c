"""
{{token}} rendering for subjects, bodies and mapping expressions.

A token is {{name}} or {{dotted.path}}. Each path segment walks one level into
the bindings (mapping keys, or integer indices into sequences). A token whose
path does not resolve, or resolves to None, is left in the output verbatim so
unmapped variables stay visible. No HTML escaping happens here.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

TOKEN_RE = re.compile(r"\{\{(\w+(?:\.\w+)*)\}\}", re.ASCII)
TOKEN_MARKER = "{{"


# Path not found; distinct from a present None
MISSING: Any = object()


def resolve(bindings: Any, path: str) -> Any:
    """Walk a dotted path through nested mappings/sequences. Returns MISSING if absent."""
    value = bindings
    for segment in path.split("."):
        if isinstance(value, Mapping):
            if segment not in value:
                return MISSING
            value = value[segment]
        elif isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            if not segment.isdigit() or int(segment) >= len(value):
                return MISSING
            value = value[int(segment)]
        else:
            return MISSING
    return value


def stringify(value: Any) -> str:
    """Text form of a resolved binding."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Mapping):
        return json.dumps(value, default=str)
    if isinstance(value, Sequence) and not isinstance(value, bytes):
        return ",".join(stringify(v) for v in value)
    return str(value)


def render(template: str, bindings: Mapping[str, Any]) -> str:
    """Substitute every resolvable token in `template`."""

    def _sub(match: "re.Match[str]") -> str:
        value = resolve(bindings, match.group(1))
        if value is MISSING or value is None:
            return match.group(0)
        return stringify(value)

    return TOKEN_RE.sub(_sub, template)


def has_tokens(text: str) -> bool:
    return TOKEN_MARKER in text


_LAYOUT = """\
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; padding: 20px; background: #f5f5f5;">
  <div style="max-width: 600px; margin: 0 auto; background: #fff; border-radius: 12px; overflow: hidden; box-shadow: 0 2px 10px rgba(0,0,0,0.1);">
    <div style="background: linear-gradient(135deg, #1e40af 0%, #3b82f6 100%); padding: 30px; text-align: center;">
      <h1 style="color: #ffffff; margin: 0; font-size: 24px;">{title}</h1>
    </div>
    <div style="padding: 30px; color: #374151; font-size: 16px; line-height: 1.6;">
      {body}
    </div>
    <div style="padding: 20px; text-align: center; background: #f9fafb; border-top: 1px solid #e5e7eb;">
      <p style="margin: 0; color: #9ca3af; font-size: 12px;">{title}</p>
      <p style="margin: 10px 0 0 0; color: #9ca3af; font-size: 12px;">{tagline}</p>
    </div>
  </div>
</body>
</html>
"""


def wrap_in_layout(body: str, title: str, tagline: str = "") -> str:
    """Place a rendered body fragment inside the branded HTML envelope."""
    return _LAYOUT.format(title=title, tagline=tagline, body=body)
