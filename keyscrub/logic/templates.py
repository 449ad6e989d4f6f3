# keyscrub/logic/templates.py

"""Banner template expansion.

Banners support exactly one token, ``{date}``, which expands to the current
date. ``{{`` and ``}}`` produce literal braces. Any other ``{name}`` is a
configuration error; template text is never evaluated.
"""

import re
from datetime import datetime
from typing import Optional

from keyscrub.core.exceptions import ConfigurationError

DATE_TOKEN = "date"

_TOKEN = re.compile(r"\{\{|\}\}|\{([^{}]*)\}|[{}]")


def validate_template(template: str) -> str:
    """Checks that a template only uses recognized tokens.

    Raises:
        ConfigurationError: On unknown tokens or unbalanced braces.
    """
    if not isinstance(template, str):
        raise ConfigurationError(f"Banner template must be text, got {type(template).__name__}")

    for match in _TOKEN.finditer(template):
        text = match.group(0)
        if text in ("{{", "}}"):
            continue
        if text in ("{", "}"):
            raise ConfigurationError(f"Unbalanced brace in banner template: {template!r}")
        if match.group(1) != DATE_TOKEN:
            raise ConfigurationError(
                f"Unknown banner token {text!r}; only {{{DATE_TOKEN}}} is supported"
            )
    return template


def expand_template(
    template: str, now: Optional[datetime] = None, date_format: str = "%Y-%m-%d"
) -> str:
    """Expands ``{date}`` tokens and brace escapes in a validated template."""
    validate_template(template)
    stamp = (now or datetime.now()).strftime(date_format)

    def _replace(match: "re.Match[str]") -> str:
        text = match.group(0)
        if text == "{{":
            return "{"
        if text == "}}":
            return "}"
        return stamp

    return _TOKEN.sub(_replace, template)
