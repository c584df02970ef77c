from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from claim_store import SinkMap
from demux import parse_norad_id, split_response
from errors import ResponseParseError

ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"


def _tle_line(norad_id: int, tag: str) -> str:
    return f"1 {norad_id:>5}U {tag}"


def test_parse_norad_id_from_both_tle_lines() -> None:
    assert parse_norad_id(ISS_LINE1) == 25544
    assert parse_norad_id(ISS_LINE2) == 25544


def test_parse_norad_id_trims_padding() -> None:
    assert parse_norad_id("1     5U 58002B") == 5
    assert parse_norad_id("1   100U 60001A") == 100


@pytest.mark.parametrize(
    "line",
    [
        "",
        "1",
        "1 ABCDEU 98067A",
        "1      U 98067A",
        "1 1_234U 98067A",
        "1 \t1234U 98067A",
        "1 \u0661\u0662\u0663\u0664\u0665U 98067A",
    ],
)
def test_parse_norad_id_malformed_field_raises(line: str) -> None:
    with pytest.raises(ResponseParseError) as excinfo:
        parse_norad_id(line)
    assert excinfo.value.line == line


@pytest.mark.parametrize("norad_id", [1, 42, 100, 2024, 25544, 99999])
def test_parse_norad_id_round_trips_formatted_ids(norad_id: int) -> None:
    assert parse_norad_id(_tle_line(norad_id, "x")) == norad_id


def test_split_response_writes_lines_verbatim_without_newline(tmp_path: Path) -> None:
    raw = f"{ISS_LINE1}\r\n{ISS_LINE2}\r\n"
    with SinkMap(tmp_path) as sinks:
        sinks.claim("25544")
        result = split_response(raw, sinks)

    assert result.lines_written == 2
    assert result.lines_dropped == 0
    assert (tmp_path / "25544.tle").read_bytes() == f"{ISS_LINE1}\r{ISS_LINE2}\r".encode()


def test_split_response_discards_trailing_segment(tmp_path: Path) -> None:
    """Text after the last newline is not a line and is never parsed or written."""
    raw = f"{_tle_line(100, 'a')}\nnot-a-tle"
    with SinkMap(tmp_path) as sinks:
        sinks.claim("100")
        result = split_response(raw, sinks)

    assert result.lines_written == 1
    assert (tmp_path / "100.tle").read_text() == _tle_line(100, "a")


def test_split_response_empty_body_writes_nothing(tmp_path: Path) -> None:
    with SinkMap(tmp_path) as sinks:
        sinks.claim("100")
        result = split_response("", sinks)

    assert result.lines_written == 0
    assert (tmp_path / "100.tle").read_text() == ""


@pytest.mark.parametrize(
    "order",
    list(itertools.permutations([(100, "a1"), (200, "b1"), (300, "c1"), (100, "a2"), (300, "c2")], 5))[::17],
)
def test_split_response_routes_interleaved_lines_to_own_file(tmp_path: Path, order) -> None:
    raw = "".join(_tle_line(norad_id, tag) + "\n" for norad_id, tag in order)

    with SinkMap(tmp_path) as sinks:
        for norad_id in ("100", "200", "300"):
            sinks.claim(norad_id)
        result = split_response(raw, sinks)

    assert result.lines_written == len(order)
    for norad_id in (100, 200, 300):
        expected = "".join(_tle_line(i, tag) for i, tag in order if i == norad_id)
        assert (tmp_path / f"{norad_id}.tle").read_text() == expected
        assert result.per_id.get(norad_id, 0) == sum(1 for i, _ in order if i == norad_id)


def test_split_response_drops_unmapped_ids_without_affecting_others(tmp_path: Path) -> None:
    raw = (
        _tle_line(100, "a") + "\n"
        + _tle_line(777, "stray") + "\n"
        + _tle_line(200, "b") + "\n"
    )
    with SinkMap(tmp_path) as sinks:
        sinks.claim("100")
        sinks.claim("200")
        result = split_response(raw, sinks)

    assert result.lines_written == 2
    assert result.lines_dropped == 1
    assert (tmp_path / "100.tle").read_text() == _tle_line(100, "a")
    assert (tmp_path / "200.tle").read_text() == _tle_line(200, "b")
    assert not (tmp_path / "777.tle").exists()


def test_split_response_malformed_line_is_fatal(tmp_path: Path) -> None:
    raw = _tle_line(100, "a") + "\n" + "<html>error</html>\n"
    with SinkMap(tmp_path) as sinks:
        sinks.claim("100")
        with pytest.raises(ResponseParseError):
            split_response(raw, sinks)
