"""
Air quality classification.

Maps PM2.5, PM10 and CO2 readings onto a single ordinal rank from
1 (excellent) to 5 (poor). Pure functions, no I/O.
"""
from __future__ import annotations

RANK_BEST = 1
RANK_WORST = 5

# (short-circuit threshold, ((threshold, rank), ...)) per scale, all comparisons strict.
# Bands are ordered from the highest threshold down.
PM25_SCALE: tuple[float, tuple[tuple[float, int], ...]] = (100, ((55.4, 4), (35.4, 3), (12, 2)))
PM10_SCALE: tuple[float, tuple[tuple[float, int], ...]] = (354, ((254, 4), (154, 3), (54, 2)))
# CO2 has no rank 4 band: anything between 1000 and 2000 ppm stays at 3
CO2_SCALE: tuple[float, tuple[tuple[float, int], ...]] = (2000, ((1000, 3), (500, 2)))


def _scale_rank(value: float, bands: tuple[tuple[float, int], ...]) -> int:
    for threshold, rank in bands:
        if value > threshold:
            return rank
    return RANK_BEST


def classify(pm25: float, pm10: float, co2: float) -> int:
    """
    Return the air quality rank for the given readings.

    Scales are evaluated in the order PM2.5, PM10, CO2. A value above its
    scale's top threshold returns 5 straight away; otherwise the worst of
    the three per-scale ranks wins.
    """
    rank = RANK_BEST
    for value, (ceiling, bands) in (
        (pm25, PM25_SCALE),
        (pm10, PM10_SCALE),
        (co2, CO2_SCALE),
    ):
        if value > ceiling:
            return RANK_WORST
        rank = max(rank, _scale_rank(value, bands))
    return rank
