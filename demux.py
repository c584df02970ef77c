"""Split one bulk TLE response into per-object appends."""

from __future__ import annotations

import logging

from claim_store import SinkMap
from errors import ResponseParseError
from models import DemuxResult

# Fixed-width TLE convention: the satellite number occupies columns 3-7
# of both element lines.
NORAD_ID_SLICE = slice(2, 7)

LOGGER = logging.getLogger(__name__)


def parse_norad_id(line: str) -> int:
    """Return the NORAD id embedded in one response line.

    This is the only place that knows the response's fixed-width layout.
    """
    raw_id = line[NORAD_ID_SLICE].strip(" ")
    # Plain ASCII decimal only; int() alone also takes "1_234", tabs and non-ASCII digits.
    if not (raw_id.isascii() and raw_id.lstrip("+-").isdigit()):
        raise ResponseParseError(line, f"field {raw_id!r} is not an integer")
    try:
        return int(raw_id)
    except ValueError as exc:
        raise ResponseParseError(line, f"field {raw_id!r} is not an integer") from exc


def split_response(raw: str, sinks: SinkMap) -> DemuxResult:
    """Route every response line to the sink of the object it belongs to.

    The segment after the last ``\\n`` is discarded. Lines are written
    exactly as received, without re-adding the newline. Lines for ids with
    no sink are dropped. A malformed id field raises ResponseParseError.
    """
    result = DemuxResult()
    lines = raw.split("\n")

    for line in lines[:-1]:
        norad_id = parse_norad_id(line)
        if norad_id not in sinks:
            result.lines_dropped += 1
            LOGGER.debug("Dropping line for unclaimed NORAD id %s", norad_id)
            continue

        sinks.write(norad_id, line)
        result.lines_written += 1
        result.per_id[norad_id] = result.per_id.get(norad_id, 0) + 1

    return result
