"""Space-Track query strings."""

from __future__ import annotations

from typing import Iterable

TLE_QUERY_TEMPLATE = (
    "{api_root}/query/class/tle/NORAD_CAT_ID/{ids}/orderby/EPOCH asc/format/tle/metadata/false"
)
SATCAT_QUERY_TEMPLATE = "{api_root}/query/class/satcat/orderby/LAUNCH asc/format/csv/metadata/false"


def build_tle_query(norad_ids: Iterable[int | str], api_root: str) -> str:
    """Build one bulk TLE query for all given ids, oldest epoch first.

    Ids are joined in the order given. Raises ValueError if there are none,
    so an empty batch can never reach the network.
    """
    ids = [str(norad_id) for norad_id in norad_ids]
    if not ids:
        raise ValueError("Cannot build a TLE query from zero NORAD ids")
    return TLE_QUERY_TEMPLATE.format(api_root=api_root.rstrip("/"), ids=",".join(ids))


def build_satcat_query(api_root: str) -> str:
    return SATCAT_QUERY_TEMPLATE.format(api_root=api_root.rstrip("/"))
