"""Heatmap projection of rollup points."""

from collections.abc import Iterable

from tierscope.core.models import HeatmapPoint, RollupPoint


def to_heatmap_point(point: RollupPoint) -> HeatmapPoint:
    """Project a RollupPoint onto the heatmap fields."""
    return HeatmapPoint(
        timestamp=point.timestamp,
        cpu_avg=point.cpu_avg,
        memory_avg=point.memory_avg,
        disk_avg=point.disk_avg,
        cpu_max=point.cpu_max,
        memory_max=point.memory_max,
        disk_max=point.disk_max,
        sample_count=point.sample_count,
    )


def build_heatmap(points: Iterable[RollupPoint]) -> list[HeatmapPoint]:
    """Project points in order. No values are recomputed."""
    return [to_heatmap_point(p) for p in points]
