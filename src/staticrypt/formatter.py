"""Placeholder substitution for staticrypt templates."""

import json
import re
from collections.abc import Mapping
from typing import Any

PLACEHOLDER_RE = re.compile(r"{{(.+?)}}")


def render_template(template: str, data: Mapping[str, Any]) -> str:
    """Replace ``{{name}}`` placeholders in template with values from data.

    Placeholder names are stripped of surrounding whitespace, so ``{{ name }}``
    and ``{{name}}`` are equivalent. String values are inserted verbatim;
    anything else is JSON-encoded (``True`` becomes ``true``).

    Placeholders with no matching key are left untouched, and keys that no
    placeholder refers to are ignored. Custom templates may therefore omit
    optional sections, but a misspelled placeholder name is not reported: it
    simply stays in the output.

    Args:
        template: Template text.
        data: Mapping of placeholder name to replacement value.

    Returns:
        Rendered text.
    """

    def _replace(match: re.Match) -> str:
        key = match.group(1).strip()
        if key not in data:
            return match.group(0)
        value = data[key]
        if isinstance(value, str):
            return value
        return json.dumps(value)

    return PLACEHOLDER_RE.sub(_replace, template)
