# keyscrub/logic/validators.py

"""Validation helpers for indicator configuration.

Indicator patterns and labels are checked once, at load time, so that a
malformed rule fails the run before any file is touched.
"""

import re
import logging
from typing import Pattern

from keyscrub.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ValidationLogic:
    """Utility methods for validating indicator rules."""

    # Labels become placeholder stems, so they must survive a round trip
    # through the "<placeholder> <value>" keylist line format.
    LABEL = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

    @staticmethod
    def check_label(label: str) -> str:
        """Ensures a label is usable as a placeholder stem.

        Args:
            label: Indicator label from configuration

        Returns:
            The label, unchanged

        Raises:
            ConfigurationError: If the label is empty or contains whitespace
                or punctuation.
        """
        if not isinstance(label, str) or not ValidationLogic.LABEL.match(label):
            error_msg = f"Invalid indicator label: {label!r}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)
        return label

    @staticmethod
    def compile_pattern(regex: str, label: str, flags: int = 0) -> Pattern[str]:
        """Compiles an indicator regex and checks it has a capture group.

        Args:
            regex: Raw pattern text
            label: Label of the owning indicator, used in error messages
            flags: Extra ``re`` flags

        Returns:
            Compiled pattern

        Raises:
            ConfigurationError: If the pattern does not compile, has no
                capture group, or its first group can only match empty text.
        """
        if not isinstance(regex, str) or not regex:
            raise ConfigurationError(f"Indicator {label!r} has an empty pattern")

        try:
            compiled = re.compile(regex, flags)
        except re.error as e:
            logger.error(
                "Indicator pattern failed to compile",
                extra={"label": label, "pattern": regex, "error": str(e)},
            )
            raise ConfigurationError(
                f"Indicator {label!r} has a malformed pattern: {e}"
            ) from e

        if compiled.groups < 1:
            raise ConfigurationError(
                f"Indicator {label!r} pattern needs a capture group for the "
                "redaction span"
            )

        return compiled
