"""
Address Resolver
Parses free-text US service addresses and geocodes them through Nominatim (OpenStreetMap)
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

import httpx

from ..config import (
    GEOCODING_ENABLED,
    GEOCODING_TIMEOUT_SECONDS,
    NOMINATIM_BASE_URL,
    NOMINATIM_USER_AGENT,
)

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"

STATE_NAMES = {
    "AL": "Alabama",
    "AK": "Alaska",
    "AZ": "Arizona",
    "AR": "Arkansas",
    "CA": "California",
    "CO": "Colorado",
    "CT": "Connecticut",
    "DE": "Delaware",
    "FL": "Florida",
    "GA": "Georgia",
    "HI": "Hawaii",
    "ID": "Idaho",
    "IL": "Illinois",
    "IN": "Indiana",
    "IA": "Iowa",
    "KS": "Kansas",
    "KY": "Kentucky",
    "LA": "Louisiana",
    "ME": "Maine",
    "MD": "Maryland",
    "MA": "Massachusetts",
    "MI": "Michigan",
    "MN": "Minnesota",
    "MS": "Mississippi",
    "MO": "Missouri",
    "MT": "Montana",
    "NE": "Nebraska",
    "NV": "Nevada",
    "NH": "New Hampshire",
    "NJ": "New Jersey",
    "NM": "New Mexico",
    "NY": "New York",
    "NC": "North Carolina",
    "ND": "North Dakota",
    "OH": "Ohio",
    "OK": "Oklahoma",
    "OR": "Oregon",
    "PA": "Pennsylvania",
    "RI": "Rhode Island",
    "SC": "South Carolina",
    "SD": "South Dakota",
    "TN": "Tennessee",
    "TX": "Texas",
    "UT": "Utah",
    "VT": "Vermont",
    "VA": "Virginia",
    "WA": "Washington",
    "WV": "West Virginia",
    "WI": "Wisconsin",
    "WY": "Wyoming",
    "DC": "District of Columbia",
}

# street, city, state code, optional zip; tried in order
_ADDRESS_PATTERNS = [
    re.compile(r"^(.+?),\s*(.+?),\s*([A-Za-z]{2})$"),
    re.compile(r"^(.+?),\s*(.+?),\s*([A-Za-z]{2})\s+(\d{5}(?:-\d{4})?)$"),
    re.compile(r"^(.+?),\s*(.+?)\s+([A-Za-z]{2})\s+(\d{5}(?:-\d{4})?)$"),
    re.compile(r"^(.+?),\s*(.+?)\s+([A-Za-z]{2})$"),
]
_STATE_CODE_PATTERN = re.compile(r"\b([A-Z]{2})\b")
_ZIP_PATTERN = re.compile(r"\b(\d{5}(?:-\d{4})?)\b")


@dataclass(frozen=True)
class ParsedAddress:
    street: str
    city: str
    state: str
    state_code: str
    zip_code: Optional[str] = None


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


def state_full_name(state_code: str) -> str:
    return STATE_NAMES.get(state_code.upper(), UNKNOWN)


def extract_state_code(part: str) -> str:
    """Find a state in a fragment, as a two-letter code or a full name"""
    match = _STATE_CODE_PATTERN.search(part)
    if match:
        return match.group(1).upper()

    lowered = part.lower()
    for code, name in STATE_NAMES.items():
        if name.lower() in lowered:
            return code

    upper = part.upper()
    for code in STATE_NAMES:
        if code in upper:
            return code

    return UNKNOWN


def extract_zip_code(part: str) -> Optional[str]:
    match = _ZIP_PATTERN.search(part)
    return match.group(1) if match else None


def parse_address(raw: str) -> ParsedAddress:
    """
    Split a free-text address into street, city, state and zip.

    Never fails: fields that cannot be found come back as ``Unknown``
    (or ``None`` for the zip code).
    """
    clean = re.sub(r"\s+", " ", (raw or "").strip())

    for pattern in _ADDRESS_PATTERNS:
        match = pattern.match(clean)
        if match:
            state_code = match.group(3).strip().upper()
            zip_code = match.group(4) if pattern.groups >= 4 else None
            return ParsedAddress(
                street=match.group(1).strip(),
                city=match.group(2).strip(),
                state=state_full_name(state_code),
                state_code=state_code,
                zip_code=zip_code,
            )

    logger.debug(f"No address pattern matched, falling back to comma split: {clean}")
    parts = [part.strip() for part in clean.split(",")]

    if len(parts) >= 3:
        state_code = extract_state_code(parts[2])
        return ParsedAddress(
            street=parts[0],
            city=parts[1],
            state=state_full_name(state_code),
            state_code=state_code,
            zip_code=extract_zip_code(parts[2]),
        )

    if len(parts) == 2:
        last = parts[1]
        state_code = extract_state_code(last)
        zip_code = extract_zip_code(last)
        city = last
        if state_code != UNKNOWN:
            city = re.sub(rf"\s*{state_code}\s*", "", city, flags=re.IGNORECASE).strip()
        if zip_code:
            city = re.sub(rf"\s*{re.escape(zip_code)}\s*", "", city).strip()
        return ParsedAddress(
            street=parts[0],
            city=city or UNKNOWN,
            state=state_full_name(state_code),
            state_code=state_code,
            zip_code=zip_code,
        )

    state_code = extract_state_code(clean)
    return ParsedAddress(
        street=clean,
        city=UNKNOWN,
        state=state_full_name(state_code),
        state_code=state_code,
        zip_code=extract_zip_code(clean),
    )


class AddressResolver:
    """Address parsing plus Nominatim geocoding with a bounded timeout"""

    def __init__(
        self,
        enabled: bool = GEOCODING_ENABLED,
        base_url: str = NOMINATIM_BASE_URL,
        user_agent: str = NOMINATIM_USER_AGENT,
        timeout: float = GEOCODING_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.enabled = enabled
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.transport = transport

    def parse_address(self, raw: str) -> ParsedAddress:
        return parse_address(raw)

    async def geocode(self, raw: str) -> Optional[GeoPoint]:
        """Coordinates for an address, or None when lookup is off, empty or fails"""
        if not self.enabled or not raw or not raw.strip():
            return None

        params = {
            "q": raw.strip(),
            "format": "json",
            "limit": "1",
            "countrycodes": "us",
        }
        headers = {"User-Agent": self.user_agent}

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                resp = await client.get(f"{self.base_url}/search", params=params, headers=headers)

            if resp.status_code >= 400:
                logger.warning(f"⚠️ Nominatim error {resp.status_code}: {resp.text[:200]}")
                return None

            results = resp.json()
            if not results:
                logger.warning(f"⚠️ No geocoding results for address: {raw}")
                return None

            first = results[0]
            point = GeoPoint(latitude=float(first["lat"]), longitude=float(first["lon"]))
            logger.info(f"📍 Geocoded address to {point.latitude}, {point.longitude}")
            return point
        except httpx.TimeoutException:
            logger.warning(f"⏱️ Geocoding timed out after {self.timeout}s for address: {raw}")
            return None
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"⚠️ Geocoding failed for address {raw!r}: {e}")
            return None
