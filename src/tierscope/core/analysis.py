"""Trend and period-comparison analytics over rollup points.

All averages are averages of the per-bucket ``*_avg`` fields, not
re-derived from raw samples.
"""

from collections.abc import Sequence

from tierscope.core.models import MetricAverages, MetricChanges, RollupPoint


def calculate_averages(points: Sequence[RollupPoint]) -> MetricAverages:
    """Average each metric's ``*_avg`` field over the points.

    Returns all-zero averages for an empty collection.
    """
    if not points:
        return MetricAverages()
    count = len(points)
    return MetricAverages(
        cpu=sum(p.cpu_avg for p in points) / count,
        memory=sum(p.memory_avg for p in points) / count,
        disk=sum(p.disk_avg for p in points) / count,
        network=sum(p.network_avg for p in points) / count,
        temperature=sum(p.temperature_avg for p in points) / count,
        load=sum(p.load_avg for p in points) / count,
    )


def percent_change(old: float, new: float) -> float:
    """Return the change from ``old`` to ``new`` in percent.

    A zero baseline reports 0 rather than infinity, so a metric that appears
    from nothing reads as unchanged. Inspect the baseline to tell the two apart.
    """
    if old == 0:
        return 0.0
    return (new - old) / old * 100


def compare_averages(old: MetricAverages, new: MetricAverages) -> MetricChanges:
    """Percent change of every metric from ``old`` to ``new``."""
    return MetricChanges(
        cpu=percent_change(old.cpu, new.cpu),
        memory=percent_change(old.memory, new.memory),
        disk=percent_change(old.disk, new.disk),
        network=percent_change(old.network, new.network),
        temperature=percent_change(old.temperature, new.temperature),
        load=percent_change(old.load, new.load),
    )


def quarter_split(
    points: Sequence[RollupPoint],
) -> tuple[Sequence[RollupPoint], Sequence[RollupPoint]]:
    """Return the first and last quarter of a chronological series.

    Both quarters hold ``len(points) // 4`` points; with fewer than four
    points both are empty.
    """
    quarter = len(points) // 4
    return points[:quarter], points[len(points) - quarter :]


def calculate_trend(points: Sequence[RollupPoint]) -> MetricChanges:
    """Percent change from the earliest quarter to the latest quarter.

    Args:
        points: Points ordered by timestamp ascending.

    Returns:
        MetricChanges; all zeros when the series is shorter than four points.
    """
    first, last = quarter_split(points)
    if not first:
        return MetricChanges()
    return compare_averages(calculate_averages(first), calculate_averages(last))


def compare_periods(
    period1: Sequence[RollupPoint], period2: Sequence[RollupPoint]
) -> tuple[MetricAverages, MetricAverages, MetricChanges]:
    """Average both periods and compute the change from period 1 to period 2."""
    averages1 = calculate_averages(period1)
    averages2 = calculate_averages(period2)
    return averages1, averages2, compare_averages(averages1, averages2)
