"""Reverse geocoding clients.

Each geocoder makes exactly one HTTP request per ``resolve`` call and maps
every outcome to either ``GeocodeResult`` or ``GeocodeFailure``. Nothing is
raised to the caller, so a failed lookup can degrade to coordinates only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence, Union

import httpx

from ...config import Settings, settings as default_settings
from ...models.domain import UNKNOWN_AREA, UNKNOWN_POSTAL_CODE, Coordinates

# Smallest named subdivision first.
AREA_FALLBACK_FIELDS = (
    "suburb",
    "neighbourhood",
    "residential",
    "village",
    "town",
    "city_district",
    "city",
    "county",
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    area: str
    postal_code: str
    provider: str


@dataclass(frozen=True, slots=True)
class GeocodeFailure:
    reason: str
    provider: str


GeocodeOutcome = Union[GeocodeResult, GeocodeFailure]


class ReverseGeocoder(Protocol):
    name: str

    async def resolve(self, coordinates: Coordinates) -> GeocodeOutcome: ...


def _non_empty(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def extract_area(address: Mapping[str, Any], display_name: str | None = None) -> str:
    """Pick the most specific recognizable area name from a Nominatim address."""
    for key in AREA_FALLBACK_FIELDS:
        value = _non_empty(address.get(key))
        if value:
            return value
    if display_name:
        first_segment = _non_empty(display_name.split(",")[0])
        if first_segment:
            return first_segment
    return UNKNOWN_AREA


def extract_postal_code(address: Mapping[str, Any]) -> str:
    return _non_empty(address.get("postcode")) or UNKNOWN_POSTAL_CODE


class _HttpGeocoder:
    name = "http"

    def __init__(
        self,
        *,
        timeout: float,
        user_agent: str,
        language: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.language = language
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            headers={"User-Agent": self.user_agent, "Accept-Language": self.language},
            transport=self._transport,
        )

    async def _get_json(self, url: str, params: dict[str, Any]) -> Any:
        """Fetch a JSON document; raises ``httpx.HTTPError`` or ``ValueError``."""
        async with self._get_client() as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
            return response.json()

    async def resolve(self, coordinates: Coordinates) -> GeocodeOutcome:
        try:
            payload = await self._get_json(*self._request(coordinates))
        except httpx.HTTPStatusError as exc:
            return self._fail(f"HTTP status {exc.response.status_code}")
        except httpx.HTTPError as exc:
            return self._fail(f"{type(exc).__name__}: {exc}")
        except ValueError as exc:
            return self._fail(f"Invalid JSON payload: {exc}")
        return self._parse(payload)

    def _fail(self, reason: str) -> GeocodeFailure:
        logger.warning(f"Reverse geocoding via {self.name} failed: {reason}")
        return GeocodeFailure(reason=reason, provider=self.name)

    def _request(self, coordinates: Coordinates) -> tuple[str, dict[str, Any]]:
        raise NotImplementedError

    def _parse(self, payload: Any) -> GeocodeOutcome:
        raise NotImplementedError


class NominatimReverseGeocoder(_HttpGeocoder):
    """OpenStreetMap Nominatim ``/reverse`` client."""

    name = "nominatim"

    def __init__(
        self,
        base_url: str | None = None,
        *,
        zoom: int | None = None,
        language: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            timeout=timeout if timeout is not None else default_settings.geocoder_timeout_seconds,
            user_agent=user_agent or default_settings.geocoder_user_agent,
            language=language or default_settings.geocoder_language,
            transport=transport,
        )
        self.base_url = (base_url or default_settings.nominatim_base_url).rstrip("/")
        self.zoom = zoom if zoom is not None else default_settings.geocoder_zoom

    def _request(self, coordinates: Coordinates) -> tuple[str, dict[str, Any]]:
        params = {
            "format": "json",
            "lat": coordinates.latitude,
            "lon": coordinates.longitude,
            "addressdetails": 1,
            "zoom": self.zoom,
            "accept-language": self.language,
        }
        return f"{self.base_url}/reverse", params

    def _parse(self, payload: Any) -> GeocodeOutcome:
        if not isinstance(payload, dict) or not isinstance(payload.get("address"), dict):
            return self._fail("Response is missing the address object")
        address = payload["address"]
        display_name = payload.get("display_name")
        return GeocodeResult(
            area=extract_area(address, display_name if isinstance(display_name, str) else None),
            postal_code=extract_postal_code(address),
            provider=self.name,
        )


class GoogleReverseGeocoder(_HttpGeocoder):
    """Google Geocoding API client; only usable with a real API key."""

    name = "google"

    def __init__(
        self,
        api_key: str,
        *,
        url: str | None = None,
        language: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Google geocoding requires an API key.")
        super().__init__(
            timeout=timeout if timeout is not None else default_settings.geocoder_timeout_seconds,
            user_agent=user_agent or default_settings.geocoder_user_agent,
            language=language or default_settings.geocoder_language,
            transport=transport,
        )
        self.api_key = api_key
        self.url = url or default_settings.google_geocoding_url

    def _request(self, coordinates: Coordinates) -> tuple[str, dict[str, Any]]:
        params = {
            "latlng": f"{coordinates.latitude},{coordinates.longitude}",
            "key": self.api_key,
            "language": self.language,
        }
        return self.url, params

    def _parse(self, payload: Any) -> GeocodeOutcome:
        if not isinstance(payload, dict):
            return self._fail("Unexpected response shape")
        status = payload.get("status")
        results = payload.get("results") or []
        if status != "OK" or not results:
            return self._fail(f"Geocoding status {status}")
        if not isinstance(results, list) or not isinstance(results[0], dict):
            return self._fail("Unexpected results shape")

        components = results[0].get("address_components") or []
        if not isinstance(components, list):
            return self._fail("Unexpected address_components shape")
        area = UNKNOWN_AREA
        postal_code = UNKNOWN_POSTAL_CODE
        for component in components:
            if not isinstance(component, dict):
                continue
            types = component.get("types")
            if not isinstance(types, list):
                types = []
            name = _non_empty(component.get("long_name"))
            if not name:
                continue
            if area == UNKNOWN_AREA and ("sublocality" in types or "locality" in types):
                area = name
            if postal_code == UNKNOWN_POSTAL_CODE and "postal_code" in types:
                postal_code = name
        return GeocodeResult(area=area, postal_code=postal_code, provider=self.name)


class ChainedReverseGeocoder:
    """Try several providers in order; the first success wins."""

    name = "chain"

    def __init__(self, geocoders: Sequence[ReverseGeocoder]) -> None:
        if not geocoders:
            raise ValueError("At least one geocoder is required.")
        self.geocoders = tuple(geocoders)

    async def resolve(self, coordinates: Coordinates) -> GeocodeOutcome:
        failure: GeocodeOutcome | None = None
        for geocoder in self.geocoders:
            outcome = await geocoder.resolve(coordinates)
            if isinstance(outcome, GeocodeResult):
                return outcome
            failure = outcome
        return failure


def build_reverse_geocoder(
    config: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ReverseGeocoder:
    """Nominatim always; Google in front of it only when a key is configured."""
    cfg = config or default_settings
    nominatim = NominatimReverseGeocoder(
        cfg.nominatim_base_url,
        zoom=cfg.geocoder_zoom,
        language=cfg.geocoder_language,
        user_agent=cfg.geocoder_user_agent,
        timeout=cfg.geocoder_timeout_seconds,
        transport=transport,
    )
    if not cfg.google_geocoding_api_key:
        return nominatim
    google = GoogleReverseGeocoder(
        cfg.google_geocoding_api_key,
        url=cfg.google_geocoding_url,
        language=cfg.geocoder_language,
        user_agent=cfg.geocoder_user_agent,
        timeout=cfg.geocoder_timeout_seconds,
        transport=transport,
    )
    return ChainedReverseGeocoder([google, nominatim])


async def check_health(geocoder: ReverseGeocoder | None = None) -> bool:
    """Check geocoder reachability with a single lookup of a well-known point."""
    probe = Coordinates(latitude=12.9716, longitude=77.5946)
    outcome = await (geocoder or build_reverse_geocoder()).resolve(probe)
    return isinstance(outcome, GeocodeResult)
