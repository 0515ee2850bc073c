import logging
from typing import Optional

import requests
from django.conf import settings

from .geo import Coordinate

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    pass


class NominatimClient:
    def __init__(
        self,
        base_url: str,
        country_suffix: str,
        language: str,
        user_agent: str,
        timeout_seconds: int,
    ):
        if not base_url:
            raise GeocodingError("Geocoding URL not configured")
        self.base_url = base_url
        self.country_suffix = country_suffix
        self.language = language
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds

    def search(self, query: str) -> Optional[Coordinate]:
        """Best single match for ``query`` or None when nothing resolves."""
        results = self._get(
            {
                "format": "json",
                "q": self._localized(query),
                "limit": 1,
            }
        )
        if not isinstance(results, list) or not results:
            return None
        return self._extract_coordinate(results[0])

    def _localized(self, query: str) -> str:
        query = query.strip()
        if self.country_suffix:
            return f"{query} {self.country_suffix}"
        return query

    def _extract_coordinate(self, result) -> Optional[Coordinate]:
        if not isinstance(result, dict):
            return None
        try:
            return Coordinate(float(result["lat"]), float(result["lon"]))
        except (KeyError, TypeError, ValueError):
            logger.warning("Unusable geocoding result: %s", result)
            return None

    def _get(self, params: dict):
        headers = {"Accept-Language": self.language, "User-Agent": self.user_agent}
        try:
            resp = requests.get(
                self.base_url,
                params=params,
                headers=headers,
                timeout=self.timeout_seconds,
            )
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise GeocodingError(str(exc)) from exc


def geocode(query: str) -> Optional[Coordinate]:
    client = NominatimClient(
        base_url=settings.GEOCODING_URL,
        country_suffix=settings.GEOCODING_COUNTRY_SUFFIX,
        language=settings.GEOCODING_LANGUAGE,
        user_agent=settings.GEOCODING_USER_AGENT,
        timeout_seconds=settings.GEOCODING_TIMEOUT_SECONDS,
    )
    return client.search(query)
