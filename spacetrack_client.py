"""Space-Track transport: one authenticated request per query."""

from __future__ import annotations

import logging
import os
import time

import requests

from errors import ConfigError, TransportError

REQUEST_TIMEOUT_SECONDS = 120

LOGGER = logging.getLogger(__name__)


class SpaceTrackClient:
    """Posts credentials plus a query URL to the Space-Track login endpoint.

    Space-Track accepts a ``query`` form field on its login URL and answers
    with the query result directly, so each call is a single round trip with
    no session to maintain. There is no retry: any failure raises
    TransportError.
    """

    def __init__(
        self,
        login_url: str,
        identity: str,
        password: str,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.login_url = login_url
        self._identity = identity
        self._password = password
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> SpaceTrackClient:
        """Build a client from SPACETRACKLOGINURL, SPACETRACKUSER and SPACETRACKPASS."""
        return cls(
            login_url=_require_env("SPACETRACKLOGINURL"),
            identity=_require_env("SPACETRACKUSER"),
            password=_require_env("SPACETRACKPASS"),
        )

    def post_query(self, query: str) -> str:
        """Submit one query and return the raw response text."""
        LOGGER.info("Requesting %s", query)
        started = time.monotonic()
        try:
            response = requests.post(
                self.login_url,
                data={
                    "identity": self._identity,
                    "password": self._password,
                    "query": query,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(f"Space-Track request failed: {exc}") from exc

        LOGGER.info(
            "Received %s bytes in %.2fs",
            len(response.content),
            time.monotonic() - started,
        )
        return response.text


def api_root_from_env() -> str:
    """Return SPACETRACKAPIROOT, the base that query paths are appended to."""
    return _require_env("SPACETRACKAPIROOT")


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigError(f"{name} environment variable is required")
    return value
