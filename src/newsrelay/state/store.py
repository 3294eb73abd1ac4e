"""
Processed-set store.

The set of previously delivered fingerprints is the only durable state.
It is read once at run start and written back in full at the end of a
successful run. A missing or corrupt file is treated as an empty set.
"""

from __future__ import annotations

import logging
from pathlib import Path

import orjson

logger = logging.getLogger(__name__)


class ProcessedSetStore:
    """
    JSON-file backed set of fingerprints.

    File format: JSON array of strings, two-space indented, UTF-8,
    trailing newline. Entries are written sorted so that
    save -> load -> save is byte-stable.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> set[str]:
        """
        Load the processed set.

        Never raises for unreadable or unparseable content; logs a warning
        and returns an empty set instead.
        """
        if not self._path.exists():
            return set()

        try:
            raw = self._path.read_bytes().strip()
        except OSError as e:
            logger.warning(
                "Unable to read state file, starting with empty set",
                extra={"state_file": str(self._path), "error": str(e)},
            )
            return set()

        if not raw:
            return set()

        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            logger.warning(
                "Unable to parse state file, starting with empty set",
                extra={"state_file": str(self._path), "error": str(e)},
            )
            return set()

        if not isinstance(data, list):
            logger.warning(
                "State file is not a JSON array, starting with empty set",
                extra={"state_file": str(self._path)},
            )
            return set()

        return {item for item in data if isinstance(item, str)}

    def save(self, fingerprints: set[str]) -> None:
        """Write the full set, creating the parent directory if needed."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = orjson.dumps(sorted(fingerprints), option=orjson.OPT_INDENT_2)
        self._path.write_bytes(payload + b"\n")
        logger.debug(
            "State file written",
            extra={"state_file": str(self._path), "entries": len(fingerprints)},
        )
