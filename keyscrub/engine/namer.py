# keyscrub/engine/namer.py

"""Collision-free placeholder allocation scoped to one key table."""

import logging
from typing import Dict, Optional, Set

from keyscrub.core.exceptions import InvariantViolation

logger = logging.getLogger(__name__)


class KeyNamer:
    """Issues placeholders of the form ``<label><n>``.

    The first request for label ``Address`` yields ``Address1``, the second
    ``Address2``, and so on. An instance never issues the same name twice,
    even when two labels could produce it (``IPv`` #41 and ``IPv4`` #1 both
    spell ``IPv41``); the colliding counter simply skips ahead.

    Counters are local to the instance. Each scout builds its own, and the
    merge step owns a separate run-scoped one, so no instance is ever shared
    between threads.
    """

    def __init__(self) -> None:
        self._counters: Dict[str, int] = {}
        self._issued: Set[str] = set()

    def next_name(self, label: str) -> str:
        """Returns a placeholder for ``label`` never issued by this instance."""
        n = self._counters.get(label, 0)
        while True:
            n += 1
            name = f"{label}{n}"
            if name not in self._issued:
                break
            logger.debug("Skipping taken placeholder", extra={"placeholder": name})

        self._counters[label] = n
        self._issued.add(name)
        return name

    def reserve(self, placeholder: str, label: Optional[str] = None) -> None:
        """Records an externally issued placeholder (e.g., from a keylist).

        When the placeholder is ``label`` followed by a number, the label's
        counter moves past that number so new names sort after it.

        Raises:
            InvariantViolation: If the placeholder was already issued.
        """
        if placeholder in self._issued:
            raise InvariantViolation(f"Placeholder {placeholder!r} reserved twice")

        self._issued.add(placeholder)

        if label and placeholder.startswith(label):
            suffix = placeholder[len(label):]
            if suffix.isdigit():
                self._counters[label] = max(self._counters.get(label, 0), int(suffix))

    def issued_count(self) -> int:
        return len(self._issued)

    def __repr__(self) -> str:
        return f"<KeyNamer labels={len(self._counters)} issued={len(self._issued)}>"
