# keyscrub/service/keylist.py

"""Reading and writing the keylist artifact.

Format::

    <banner line(s)>
    <placeholder> <original value>
    List of files using this Key:
    <timestamp> - <output path>
"""

import re
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from keyscrub.core.definitions import KEYLIST_FILES_HEADER, KEYLIST_RECORD_SEPARATOR
from keyscrub.core.domain import KeyEntry, KeyTable, SanitizedRecord
from keyscrub.core.exceptions import InputError

logger = logging.getLogger(__name__)

_TRAILING_DIGITS = re.compile(r"^(.*?)(\d+)$")

# A valid label followed by its counter
_PLACEHOLDER = re.compile(r"^[A-Za-z][A-Za-z0-9_]*?\d+$")


def render_keylist(
    banner: str, key_table: KeyTable, records: Iterable[SanitizedRecord]
) -> str:
    """Renders the keylist text for a finished run.

    Args:
        banner: Expanded banner; omitted when empty
        key_table: Global key table
        records: One record per sanitized file
    """
    lines: List[str] = []
    if banner:
        lines.extend(banner.rstrip("\n").split("\n"))

    lines.extend(f"{e.placeholder} {e.original_value}" for e in key_table)
    lines.append(KEYLIST_FILES_HEADER)
    lines.extend(
        f"{r.timestamp}{KEYLIST_RECORD_SEPARATOR}{r.output_path}" for r in records
    )
    return "\n".join(lines) + "\n"


def recover_label(placeholder: str, labels: Sequence[str] = ()) -> str:
    """Works out which label a persisted placeholder was issued under.

    Known labels are tried longest first, so ``IPv41`` maps to ``IPv4`` when
    that label is configured. Otherwise trailing digits are stripped.
    """
    for label in sorted(set(labels), key=len, reverse=True):
        suffix = placeholder[len(label):]
        if placeholder.startswith(label) and suffix.isdigit():
            return label

    match = _TRAILING_DIGITS.match(placeholder)
    if match and match.group(1):
        return match.group(1)
    return placeholder


def _banner_end(lines: Sequence[str]) -> int:
    """Index of the first line after the banner.

    The banner ends at the first key line (a placeholder-shaped first token)
    or at the file header, whichever comes first.
    """
    for index, line in enumerate(lines):
        if line == KEYLIST_FILES_HEADER:
            return index
        if _PLACEHOLDER.match(line.partition(" ")[0]):
            return index
    return len(lines)


def parse_keylist(
    text: str, banner_lines: Optional[int] = None, labels: Sequence[str] = ()
) -> Tuple[KeyTable, List[SanitizedRecord]]:
    """Parses keylist text produced by render_keylist.

    Args:
        text: Keylist content
        banner_lines: Number of leading banner lines to skip; found from the
            first key line when not given, so keylists written under a
            different banner still load
        labels: Configured indicator labels, used to recover entry labels

    Returns:
        The persisted key table and file records

    Raises:
        ValueError: If a key line has no value or the file header is missing.
    """
    all_lines = text.splitlines()
    if banner_lines is None:
        banner_lines = _banner_end(all_lines)
    lines = all_lines[banner_lines:]
    table = KeyTable()
    records: List[SanitizedRecord] = []
    in_records = False

    for number, line in enumerate(lines, start=banner_lines + 1):
        if not in_records:
            if line == KEYLIST_FILES_HEADER:
                in_records = True
                continue
            if not line:
                continue

            placeholder, sep, value = line.partition(" ")
            if not sep or not value:
                raise ValueError(f"Line {number}: expected '<placeholder> <value>'")
            if placeholder in table:
                raise ValueError(f"Line {number}: duplicate placeholder {placeholder!r}")

            table.add(
                KeyEntry(
                    placeholder=placeholder,
                    original_value=value,
                    label=recover_label(placeholder, labels),
                )
            )
        elif line:
            timestamp, sep, output_path = line.partition(KEYLIST_RECORD_SEPARATOR)
            if not sep:
                raise ValueError(f"Line {number}: expected '<timestamp> - <path>'")
            records.append(SanitizedRecord(output_path=output_path, timestamp=timestamp))

    if not in_records:
        raise ValueError(f"Keylist is missing the '{KEYLIST_FILES_HEADER}' line")

    return table, records


def write_keylist(
    path: Union[str, Path],
    banner: str,
    key_table: KeyTable,
    records: Iterable[SanitizedRecord],
    encoding: str = "utf-8",
) -> Path:
    """Writes the keylist artifact.

    Raises:
        InputError: If the file cannot be written.
    """
    path = Path(path)
    try:
        path.write_text(render_keylist(banner, key_table, records), encoding=encoding)
    except OSError as e:
        raise InputError(str(path), f"cannot write keylist: {e.strerror or e}") from e

    logger.info("Keylist written", extra={"path": str(path), "key_count": len(key_table)})
    return path


def read_keylist(
    path: Union[str, Path],
    banner_lines: Optional[int] = None,
    labels: Sequence[str] = (),
    encoding: str = "utf-8",
) -> KeyTable:
    """Loads a persisted keylist as a seed table for a new run.

    Raises:
        InputError: If the file cannot be read or is not a keylist.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(str(path), f"cannot read keylist: {e}") from e

    try:
        table, _ = parse_keylist(text, banner_lines=banner_lines, labels=labels)
    except ValueError as e:
        raise InputError(str(path), str(e)) from e

    logger.info("Keylist imported", extra={"path": str(path), "key_count": len(table)})
    return table

