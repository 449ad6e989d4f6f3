# keyscrub/engine/sanitizer.py

"""Literal, longest-value-first substitution of known values."""

import logging
from typing import List, Tuple

from keyscrub.core.domain import KeyTable

logger = logging.getLogger(__name__)


def substitution_order(key_table: KeyTable) -> List[Tuple[str, str]]:
    """Returns (value, placeholder) pairs, longest value first.

    The sort is stable, so values of equal length keep table order. Replacing
    ``10.0.0.15`` before ``10.0.0.1`` is what keeps the shorter value from
    eating into the longer one.
    """
    pairs = [(e.original_value, e.placeholder) for e in key_table]
    return sorted(pairs, key=lambda pair: len(pair[0]), reverse=True)


def sanitize(content: str, key_table: KeyTable, banner: str = "") -> str:
    """Replaces every known value in ``content`` with its placeholder.

    Substitution is plain string replacement, applied cumulatively in
    descending value length. Values absent from this content are no-ops.

    Args:
        content: Original file text
        key_table: Finalized key table, normally the global one
        banner: Already expanded banner, prepended on its own line(s)

    Returns:
        Banner followed by the sanitized content
    """
    text = content
    for value, placeholder in substitution_order(key_table):
        if value in text:
            text = text.replace(value, placeholder)

    if not banner:
        return text

    if not banner.endswith("\n"):
        banner += "\n"
    return banner + text
