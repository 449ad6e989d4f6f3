# keyscrub/core/domain.py

"""Domain models for indicators, key tables, and run results."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Pattern

from keyscrub.core.exceptions import InvariantViolation
from keyscrub.logic.validators import ValidationLogic


@dataclass(frozen=True)
class Indicator:
    """A rule describing what to find and what to call it.

    Attributes:
        pattern: Compiled regex; its first capture group is the redaction span
        label: Placeholder stem (e.g., Address -> Address1)
    """

    pattern: Pattern[str]
    label: str

    @classmethod
    def compile(cls, regex: str, label: str, flags: int = 0) -> "Indicator":
        """Builds an indicator from raw configuration values.

        Raises:
            ConfigurationError: If the regex or label is unusable.
        """
        ValidationLogic.check_label(label)
        return cls(pattern=ValidationLogic.compile_pattern(regex, label, flags), label=label)

    def __repr__(self) -> str:
        return f"<Indicator {self.label} /{self.pattern.pattern}/>"


@dataclass(frozen=True)
class KeyEntry:
    """A single placeholder and the sensitive value it stands for.

    Attributes:
        placeholder: Generic name substituted into sanitized output
        original_value: Literal text extracted from the source
        label: Indicator label the placeholder was issued under
    """

    placeholder: str
    original_value: str
    label: str


class KeyTable:
    """Ordered mapping of placeholder to original value.

    Both placeholders and values are unique within one table. Inserting a
    value that is already present is a no-op; inserting a placeholder that is
    already present is a bug and raises InvariantViolation. A frozen table
    rejects every insert.
    """

    def __init__(self, entries: Optional[List[KeyEntry]] = None) -> None:
        self._by_placeholder: Dict[str, KeyEntry] = {}
        self._by_value: Dict[str, KeyEntry] = {}
        self._frozen = False

        for entry in entries or []:
            self.add(entry)

    def add(self, entry: KeyEntry) -> bool:
        """Inserts an entry unless its value is already covered.

        Returns:
            True if the entry was inserted, False if its value was present

        Raises:
            InvariantViolation: On a frozen table or a duplicate placeholder.
        """
        if self._frozen:
            raise InvariantViolation(
                f"Cannot add {entry.placeholder!r} to a frozen key table"
            )

        if entry.original_value in self._by_value:
            return False

        if entry.placeholder in self._by_placeholder:
            raise InvariantViolation(
                f"Placeholder {entry.placeholder!r} already issued for "
                f"{self._by_placeholder[entry.placeholder].original_value!r}"
            )

        self._by_placeholder[entry.placeholder] = entry
        self._by_value[entry.original_value] = entry
        return True

    def freeze(self) -> "KeyTable":
        """Marks the table read-only and returns it."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def has_value(self, value: str) -> bool:
        return value in self._by_value

    def get_by_value(self, value: str) -> Optional[KeyEntry]:
        return self._by_value.get(value)

    def get(self, placeholder: str) -> Optional[KeyEntry]:
        return self._by_placeholder.get(placeholder)

    def entries(self) -> List[KeyEntry]:
        """Returns entries in insertion order."""
        return list(self._by_placeholder.values())

    def placeholders(self) -> List[str]:
        return list(self._by_placeholder)

    def as_dict(self) -> Dict[str, str]:
        """Returns the placeholder -> original value mapping."""
        return {p: e.original_value for p, e in self._by_placeholder.items()}

    def copy(self) -> "KeyTable":
        """Returns an unfrozen copy with the same entries in the same order."""
        return KeyTable(self.entries())

    def __contains__(self, placeholder: object) -> bool:
        return placeholder in self._by_placeholder

    def __iter__(self) -> Iterator[KeyEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self._by_placeholder)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyTable):
            return NotImplemented
        return {p: (e.original_value, e.label) for p, e in self._by_placeholder.items()} == {
            p: (e.original_value, e.label) for p, e in other._by_placeholder.items()
        }

    def __repr__(self) -> str:
        state = " frozen" if self._frozen else ""
        return f"<KeyTable entries={len(self)}{state}>"


@dataclass(frozen=True)
class SanitizedRecord:
    """One processed file, as listed in the keylist artifact."""

    output_path: str
    timestamp: str


@dataclass(frozen=True)
class FileFailure:
    """A file whose scout or sanitize task failed.

    Attributes:
        path: Input path of the file
        phase: "scout" or "sanitize"
        message: Human-readable failure description
    """

    path: str
    phase: str
    message: str


@dataclass(frozen=True)
class ProgressEvent:
    """Emitted each time a task of either parallel phase completes."""

    phase: str
    path: str
    completed: int
    total: int
    ok: bool = True


@dataclass
class RunReport:
    """Result object returned by the orchestrator.

    Attributes:
        global_table: Frozen key table shared by every sanitized file
        records: One record per sanitized file, in input order
        outputs: Input path -> sanitized content
        failures: Files that could not be scouted or sanitized
        metadata: Additional processing information
    """

    global_table: KeyTable
    records: List[SanitizedRecord] = field(default_factory=list)
    outputs: Dict[str, str] = field(default_factory=dict)
    failures: List[FileFailure] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failures and self.metadata.get("status") == "completed"
