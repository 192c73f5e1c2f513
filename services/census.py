# services/census.py
"""
US Census API client used by the demographics aggregator.

Three lookups are exposed:
- resolve_area: reverse-geocode a point to its state + county FIPS codes
  (Census Geocoder, geographies/coordinates)
- list_block_groups: enumerate the block groups of a county (ACS 5-year)
- fetch_block_group: fetch the named counts for one block group (ACS 5-year)

Requests go through one pooled requests.Session with urllib3 retries.
"""

import logging
from typing import Dict, List, NamedTuple, Optional

import requests
from django.conf import settings
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from services import EnrichmentError

logger = logging.getLogger(__name__)


GEOCODER_URL = "https://geocoding.geo.census.gov/geocoder/geographies/coordinates"
ACS_URL_TEMPLATE = "https://api.census.gov/data/{year}/acs/acs5"

# ACS 5-year variable -> field name. Denominators travel with their numerators.
ACS_VARIABLES = {
    'B01003_001E': 'total_population',
    'B19013_001E': 'median_household_income',
    'B25001_001E': 'total_housing_units',
    'B25003_001E': 'occupied_housing_units',
    'B25003_002E': 'owner_occupied_housing',
    'B15003_001E': 'education_population',
    'B15003_022E': 'bachelors_degree',
    'B15003_023E': 'masters_degree',
    'B15003_024E': 'professional_degree',
    'B15003_025E': 'doctorate_degree',
    'B08303_001E': 'total_commuters',
    'B08303_008E': 'commute_30_34',
    'B08303_009E': 'commute_35_39',
    'B08303_010E': 'commute_40_44',
    'B08303_011E': 'commute_45_59',
    'B08303_012E': 'commute_60_89',
    'B08303_013E': 'commute_90_plus',
    'B08301_001E': 'total_workers',
    'B08301_021E': 'work_from_home',
    'B19001_001E': 'total_households',
    'B19001_017E': 'households_200k_plus',
}

BLOCK_GROUP_FIELDS = tuple(ACS_VARIABLES.values())


class CensusArea(NamedTuple):
    state: str
    county: str


class BlockGroup(NamedTuple):
    state: str
    county: str
    tract: str
    block_group: str
    name: str = ''


def parse_count(value) -> int:
    """
    Convert an ACS cell to a non-negative integer.

    Missing and non-numeric cells become 0, as do the negative sentinels ACS
    uses for suppressed estimates (e.g. -666666666).
    """
    if value is None:
        return 0
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return 0
    return number if number > 0 else 0


def _rows_as_dicts(payload) -> List[Dict[str, str]]:
    """ACS responses are a header row followed by data rows."""
    if not isinstance(payload, list) or len(payload) < 2:
        return []
    header = payload[0]
    return [dict(zip(header, row)) for row in payload[1:]]


class CensusClient:
    """
    Client for the Census Geocoder and the ACS 5-year API.

    resolve_area() and list_block_groups() raise EnrichmentError;
    fetch_block_group() logs failures and returns None so a single bad block
    group never fails a whole request.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        year: Optional[str] = None,
        benchmark: Optional[str] = None,
        vintage: Optional[str] = None,
        timeout: Optional[int] = None,
        total_retries: int = 2,
        backoff_factor: float = 0.5,
        pool_maxsize: int = 10,
    ):
        self.api_key = api_key if api_key is not None else settings.CENSUS_API_KEY
        self.year = year or settings.CENSUS_ACS_YEAR
        self.benchmark = benchmark or settings.CENSUS_GEOCODER_BENCHMARK
        self.vintage = vintage or settings.CENSUS_GEOCODER_VINTAGE
        self.timeout = timeout or settings.CENSUS_REQUEST_TIMEOUT
        self.acs_url = ACS_URL_TEMPLATE.format(year=self.year)
        self.session = self._create_session(total_retries, backoff_factor, pool_maxsize)

    def _create_session(self, total_retries, backoff_factor, pool_maxsize) -> requests.Session:
        session = requests.Session()

        retry_strategy = Retry(
            total=total_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False
        )
        adapter = HTTPAdapter(
            max_retries=retry_strategy,
            pool_connections=2,
            pool_maxsize=pool_maxsize,
        )
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def close(self):
        self.session.close()

    def _get_json(self, url: str, params: dict):
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise EnrichmentError(f"Census request failed: {str(e)}") from e
        except ValueError as e:
            raise EnrichmentError(f"Census response was not valid JSON: {str(e)}") from e

    def resolve_area(self, latitude: float, longitude: float) -> CensusArea:
        """Resolve the state and county containing a point."""
        data = self._get_json(GEOCODER_URL, {
            'x': longitude,
            'y': latitude,
            'benchmark': self.benchmark,
            'vintage': self.vintage,
            'format': 'json',
        })
        try:
            geographies = data['result']['geographies']
            state = geographies['States'][0]['STATE']
            county = geographies['Counties'][0]['COUNTY']
        except (KeyError, IndexError, TypeError) as e:
            raise EnrichmentError(
                f"Unable to determine census geography for ({latitude}, {longitude})"
            ) from e

        logger.debug(f"Resolved ({latitude}, {longitude}) to state {state}, county {county}")
        return CensusArea(state, county)

    def list_block_groups(self, state: str, county: str) -> List[BlockGroup]:
        """List every block group in a county, in Census API order."""
        data = self._get_json(self.acs_url, {
            'get': 'NAME',
            'for': 'block group:*',
            'in': f'state:{state} county:{county}',
            'key': self.api_key,
        })
        block_groups = []
        for row in _rows_as_dicts(data):
            try:
                block_groups.append(BlockGroup(
                    state=row['state'],
                    county=row['county'],
                    tract=row['tract'],
                    block_group=row['block group'],
                    name=row.get('NAME') or '',
                ))
            except KeyError as e:
                raise EnrichmentError(f"Unexpected block group listing format: missing {e}") from e
        return block_groups

    def fetch_block_group(self, block_group: BlockGroup) -> Optional[Dict[str, int]]:
        """
        Fetch the named counts for one block group.

        Returns:
            Mapping of field name -> count, or None when the fetch failed
        """
        try:
            data = self._get_json(self.acs_url, {
                'get': ','.join(ACS_VARIABLES),
                'for': f'block group:{block_group.block_group}',
                'in': (
                    f'state:{block_group.state} county:{block_group.county} '
                    f'tract:{block_group.tract}'
                ),
                'key': self.api_key,
            })
            rows = _rows_as_dicts(data)
            if not rows:
                raise EnrichmentError("no data rows returned")
        except EnrichmentError as e:
            logger.warning(
                f"Skipping block group {block_group.state}{block_group.county}"
                f"{block_group.tract}{block_group.block_group}: {str(e)}"
            )
            return None

        row = rows[0]
        return {field: parse_count(row.get(variable)) for variable, field in ACS_VARIABLES.items()}
