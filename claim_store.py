"""Exclusive per-object output claims.

Creating ``<output_dir>/<norad_id>.tle`` with O_EXCL is both the
de-duplication gate and the output sink: if the file already exists the
object was fetched (or claimed) by an earlier run and is skipped. The
filesystem enforces this across processes, not just within one.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import IO, Iterator

from errors import ClaimError
from models import ClaimStatus

ARTIFACT_SUFFIX = ".tle"
ARTIFACT_MODE = 0o600
_OPEN_FLAGS = os.O_WRONLY | os.O_APPEND | os.O_CREAT | os.O_EXCL

LOGGER = logging.getLogger(__name__)


def artifact_path(output_dir: str | Path, norad_id: str | int) -> Path:
    """Return the output file path for one object."""
    return Path(output_dir) / f"{norad_id}{ARTIFACT_SUFFIX}"


class SinkMap:
    """Claimed sinks for one batch cycle, keyed by numeric NORAD id.

    Use as a context manager so every handle is released when the cycle
    ends, whether or not it succeeded::

        with SinkMap(out_dir) as sinks:
            sinks.claim("25544")
            sinks.write(25544, line)
    """

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)
        self._handles: dict[int, IO[str]] = {}

    def __enter__(self) -> SinkMap:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __contains__(self, norad_id: object) -> bool:
        return norad_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[int]:
        return iter(self._handles)

    @property
    def ids(self) -> list[int]:
        """Claimed ids in claim order."""
        return list(self._handles)

    def claim(self, norad_id: str) -> ClaimStatus:
        """Exclusively create the object's artifact and keep an append handle.

        Returns ALREADY_CLAIMED if the artifact exists. Raises ClaimError for
        a non-numeric id or any other OS failure.
        """
        text = norad_id.strip(" ")
        if not (text.isascii() and text.isdigit()):
            raise ClaimError(f"NORAD id {norad_id!r} is not numeric")
        numeric_id = int(text)

        if numeric_id in self._handles:
            LOGGER.warning("NORAD id %s listed twice in this batch. Skipping the repeat.", norad_id)
            return ClaimStatus.ALREADY_CLAIMED

        path = artifact_path(self.output_dir, text)
        try:
            fd = os.open(path, _OPEN_FLAGS, ARTIFACT_MODE)
        except FileExistsError:
            LOGGER.warning("%s already exists. Skipping NORAD id %s.", path, norad_id)
            return ClaimStatus.ALREADY_CLAIMED
        except OSError as exc:
            raise ClaimError(f"Cannot create {path}: {exc}") from exc

        # newline="" so response text is written byte-for-byte.
        self._handles[numeric_id] = os.fdopen(fd, "a", encoding="utf-8", newline="")
        LOGGER.debug("Claimed %s", path)
        return ClaimStatus.CLAIMED

    def write(self, norad_id: int, text: str) -> None:
        """Append text to a claimed sink exactly as given."""
        handle = self._handles.get(norad_id)
        if handle is None:
            raise ClaimError(f"NORAD id {norad_id} has no claimed sink")
        try:
            handle.write(text)
        except OSError as exc:
            raise ClaimError(f"Cannot write to sink for NORAD id {norad_id}: {exc}") from exc

    def close(self) -> None:
        """Release every handle. Close errors are raised after all handles are tried."""
        first_error: OSError | None = None
        handles, self._handles = self._handles, {}
        for norad_id, handle in handles.items():
            try:
                handle.close()
            except OSError as exc:
                LOGGER.error("Failed closing sink for NORAD id %s: %s", norad_id, exc)
                first_error = first_error or exc
        if first_error is not None:
            raise ClaimError(f"Failed closing sinks: {first_error}") from first_error
