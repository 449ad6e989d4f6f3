# keyscrub/engine/merger.py

"""Combines per-file key tables into the run-wide global key table."""

import logging
from typing import Optional, Sequence

from keyscrub.core.domain import KeyEntry, KeyTable
from keyscrub.engine.namer import KeyNamer

logger = logging.getLogger(__name__)


def merge(tables: Sequence[KeyTable], seed: Optional[KeyTable] = None) -> KeyTable:
    """Builds one canonical key table from per-file tables.

    Any value found in several files collapses to a single placeholder. The
    first table that contributes a value fixes its number, so callers must
    pass tables in a reproducible order (the order files were given, not the
    order their scouts finished).

    Per-file placeholders are never carried over; every entry is renumbered
    by a run-scoped namer using the label stored on the entry. The exception
    is a lone table with no seed, which is returned as-is since there is
    nothing to reconcile.

    Args:
        tables: Per-file key tables in input order
        seed: Previously persisted table whose placeholders must be kept

    Returns:
        A frozen global key table
    """
    if seed is None and len(tables) == 1:
        logger.debug("Single key table, skipping renumbering")
        return tables[0].copy().freeze()

    namer = KeyNamer()
    merged = KeyTable()

    if seed is not None:
        for entry in seed:
            namer.reserve(entry.placeholder, entry.label)
            merged.add(entry)

    for table in tables:
        for entry in table:
            if merged.has_value(entry.original_value):
                continue

            merged.add(
                KeyEntry(
                    placeholder=namer.next_name(entry.label),
                    original_value=entry.original_value,
                    label=entry.label,
                )
            )

    logger.info(
        "Key tables merged",
        extra={
            "table_count": len(tables),
            "seed_count": len(seed) if seed is not None else 0,
            "key_count": len(merged),
        },
    )
    return merged.freeze()
