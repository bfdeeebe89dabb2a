from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import requests

from gasmon.core.sources import ReadingSourceUnavailable
from gasmon.domain.models import RawReading
from gasmon.transport.payload import InvalidPayloadError, raw_reading_from_dict


@dataclass(frozen=True)
class HttpSourceConfig:
    """
    Configuration for polling the ingest API over HTTP.

    Parameters
    ----------
    url
        ``GET`` endpoint returning the latest raw reading.
    timeout_s
        HTTP request timeout in seconds.
    """

    url: str
    timeout_s: float = 2.0


class HttpReadingSource:
    """
    Reading source that fetches the latest reading from the ingest API.

    Notes
    -----
    - This class performs side effects (network I/O).
    - Any transport or decoding failure is raised as
      `ReadingSourceUnavailable`; the monitoring loop skips the cycle.
    """

    def __init__(self, cfg: HttpSourceConfig, session: requests.Session | None = None):
        self._cfg = cfg
        self._session = session or requests.Session()

    def fetch_latest(self) -> RawReading:
        """
        Fetch the latest raw reading.

        Returns
        -------
        RawReading
            Reading decoded from the response body.

        Raises
        ------
        ReadingSourceUnavailable
            On network errors, HTTP error statuses or an undecodable body.
        """
        try:
            r = self._session.get(self._cfg.url, timeout=self._cfg.timeout_s)
            r.raise_for_status()
            body = r.json()
        except (requests.RequestException, ValueError) as e:
            raise ReadingSourceUnavailable(f"GET {self._cfg.url} failed: {e!r}") from e

        try:
            return raw_reading_from_dict(body, default_ts=datetime.now())
        except InvalidPayloadError as e:
            raise ReadingSourceUnavailable(f"bad reading from {self._cfg.url}: {e}") from e

    def close(self) -> None:
        self._session.close()
