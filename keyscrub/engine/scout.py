# keyscrub/engine/scout.py

"""Per-file key extraction."""

import logging
from typing import AbstractSet, Sequence

from keyscrub.core.domain import Indicator, KeyEntry, KeyTable
from keyscrub.engine.namer import KeyNamer

logger = logging.getLogger(__name__)


def scout(
    content: str, indicators: Sequence[Indicator], ignore_list: AbstractSet[str]
) -> KeyTable:
    """Extracts sensitive values from one file's content.

    Every indicator runs against the original content, so no indicator sees
    another's redactions. Indicator order only decides the order in which
    placeholders are allocated.

    Args:
        content: Decoded file text
        indicators: Ordered indicator set
        ignore_list: Literal values that are never tokenized

    Returns:
        A fresh key table owned by the caller, numbered by a private namer
    """
    namer = KeyNamer()
    table = KeyTable()

    if not content:
        return table

    for indicator in indicators:
        for match in indicator.pattern.finditer(content):
            value = match.group(1)

            # Group did not participate, or matched nothing
            if not value:
                continue

            if table.has_value(value) or value in ignore_list:
                continue

            table.add(
                KeyEntry(
                    placeholder=namer.next_name(indicator.label),
                    original_value=value,
                    label=indicator.label,
                )
            )

    logger.debug(
        "Scout completed",
        extra={"content_length": len(content), "key_count": len(table)},
    )
    return table
