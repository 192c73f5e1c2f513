# services/demographics.py
"""
Census demographics around a point.

The aggregator resolves the county containing the point, enumerates its
block groups and fetches each candidate concurrently. All fetches are joined
before the single reduce step in aggregate_demographics().

Radius handling: block groups are not filtered geometrically. The candidate
list is capped at DEMOGRAPHICS_MAX_BLOCK_GROUPS (first N in Census order) as
a resource bound, and the response reports both the number analyzed and the
number available so callers can see the approximation.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from django.conf import settings

from services import EnrichmentError, PartialDataError
from services.census import CensusClient

logger = logging.getLogger(__name__)

COMMUTE_30_PLUS_FIELDS = (
    'commute_30_34',
    'commute_35_39',
    'commute_40_44',
    'commute_45_59',
    'commute_60_89',
    'commute_90_plus',
)

BACHELORS_PLUS_FIELDS = (
    'bachelors_degree',
    'masters_degree',
    'professional_degree',
    'doctorate_degree',
)

# result key -> (numerator fields, denominator field)
PERCENT_METRICS = {
    'owner_occupied_percent': (('owner_occupied_housing',), 'occupied_housing_units'),
    'commute_30_plus_percent': (COMMUTE_30_PLUS_FIELDS, 'total_commuters'),
    'bachelors_degree_percent': (BACHELORS_PLUS_FIELDS, 'education_population'),
    'work_from_home_percent': (('work_from_home',), 'total_workers'),
    'households_200k_percent': (('households_200k_plus',), 'total_households'),
}


def round_half_up(value, places=0):
    """Round like a person would: 0.05 -> 0.1, 2.5 -> 3."""
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def percentage(numerator: int, denominator: int) -> float:
    if denominator <= 0:
        return 0.0
    return float(round_half_up(Decimal(numerator) * 100 / Decimal(denominator), 1))


def weighted_median_income(units: Iterable[Dict[str, int]]) -> int:
    """
    Population-weighted mean of block group median incomes.

    A unit that does not report an income counts as zero income, so its
    population still weighs on the result.
    """
    weighted_sum = 0
    population = 0
    for unit in units:
        income = unit.get('median_household_income', 0)
        pop = unit.get('total_population', 0)
        if pop > 0:
            weighted_sum += income * pop
            population += pop
    if population == 0:
        return 0
    return int(round_half_up(Decimal(weighted_sum) / Decimal(population)))


def _total(units: List[Dict[str, int]], field: str) -> int:
    return sum(unit.get(field, 0) for unit in units)


def empty_demographics(radius, block_groups_available=0) -> dict:
    return {
        'radius': radius,
        'total_population': 0,
        'median_household_income': 0,
        'total_housing_units': 0,
        'owner_occupied_percent': 0.0,
        'commute_30_plus_percent': 0.0,
        'bachelors_degree_percent': 0.0,
        'work_from_home_percent': 0.0,
        'households_200k_percent': 0.0,
        'block_groups_analyzed': 0,
        'block_groups_available': block_groups_available,
    }


def aggregate_demographics(units: List[Dict[str, int]], radius, block_groups_available=None) -> dict:
    """
    Combine per-block-group counts into one summary.

    Additive counts are summed. Each percentage is the sum of its numerators
    over the sum of its own denominator, so block groups weigh in by size.

    Raises:
        PartialDataError: if there are no units to aggregate
    """
    if not units:
        raise PartialDataError("No block groups returned usable data")

    if block_groups_available is None:
        block_groups_available = len(units)

    result = {
        'radius': radius,
        'total_population': _total(units, 'total_population'),
        'median_household_income': weighted_median_income(units),
        'total_housing_units': _total(units, 'total_housing_units'),
    }
    for key, (numerators, denominator) in PERCENT_METRICS.items():
        numerator_total = sum(_total(units, field) for field in numerators)
        result[key] = percentage(numerator_total, _total(units, denominator))

    result['block_groups_analyzed'] = len(units)
    result['block_groups_available'] = block_groups_available
    return result


class DemographicsService:
    """Resolve, fan out, join, reduce."""

    def __init__(self, client: Optional[CensusClient] = None, max_block_groups=None, max_workers=None):
        self.client = client or CensusClient()
        self.max_block_groups = max_block_groups or settings.DEMOGRAPHICS_MAX_BLOCK_GROUPS
        self.max_workers = max_workers or settings.DEMOGRAPHICS_MAX_WORKERS

    @property
    def is_configured(self) -> bool:
        return self.client.is_configured

    def close(self):
        """Release the census client's pooled connections."""
        self.client.close()

    def fetch_units(self, block_groups) -> List[Dict[str, int]]:
        """Fetch block groups concurrently; failed fetches are dropped."""
        if not block_groups:
            return []

        units = []
        workers = max(1, min(self.max_workers, len(block_groups)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(self.client.fetch_block_group, bg): bg for bg in block_groups}
            for future in as_completed(futures):
                try:
                    unit = future.result()
                except Exception as e:
                    logger.warning(f"Block group fetch raised for {futures[future]}: {str(e)}")
                    continue
                if unit is not None:
                    units.append(unit)
        return units

    def get_demographics(self, latitude: float, longitude: float, radius_miles: float) -> dict:
        """
        Demographics summary for the area around a point.

        Never raises for provider failures: an unresolvable area or a set of
        block groups that all fail yields the all-zero summary.
        """
        try:
            area = self.client.resolve_area(latitude, longitude)
            block_groups = self.client.list_block_groups(area.state, area.county)
        except EnrichmentError as e:
            logger.warning(f"Demographics unavailable for ({latitude}, {longitude}): {str(e)}")
            return empty_demographics(radius_miles)

        available = len(block_groups)
        candidates = block_groups[:self.max_block_groups]
        logger.info(
            f"Analyzing {len(candidates)} of {available} block groups in "
            f"state {area.state}, county {area.county}"
        )

        units = self.fetch_units(candidates)

        try:
            result = aggregate_demographics(units, radius_miles, block_groups_available=available)
        except PartialDataError as e:
            logger.warning(f"{str(e)} for ({latitude}, {longitude})")
            return empty_demographics(radius_miles, block_groups_available=available)

        logger.info(f"Demographics aggregated from {result['block_groups_analyzed']} block groups")
        return result
