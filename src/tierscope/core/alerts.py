"""Threshold alerts for a single rollup point.

A standalone helper; no query operation evaluates alerts on its own.
"""

from tierscope.core.models import RollupPoint

CPU_HIGH = 80.0
CPU_MODERATE = 60.0
MEMORY_HIGH = 85.0
MEMORY_MODERATE = 70.0
DISK_CRITICAL = 90.0
DISK_HIGH = 80.0
TEMPERATURE_HIGH = 80.0
LOAD_HIGH = 2.0
NETWORK_HIGH = 1000.0  # MB/s


def evaluate_alerts(point: RollupPoint) -> list[str]:
    """Return human-readable alerts for the averages of one point."""
    alerts: list[str] = []

    if point.cpu_avg > CPU_HIGH:
        alerts.append(f"High CPU usage: {point.cpu_avg:.1f}%")
    elif point.cpu_avg > CPU_MODERATE:
        alerts.append(f"Moderate CPU usage: {point.cpu_avg:.1f}%")

    if point.memory_avg > MEMORY_HIGH:
        alerts.append(f"High memory usage: {point.memory_avg:.1f}%")
    elif point.memory_avg > MEMORY_MODERATE:
        alerts.append(f"Moderate memory usage: {point.memory_avg:.1f}%")

    if point.disk_avg > DISK_CRITICAL:
        alerts.append(f"Critical disk usage: {point.disk_avg:.1f}%")
    elif point.disk_avg > DISK_HIGH:
        alerts.append(f"High disk usage: {point.disk_avg:.1f}%")

    if point.temperature_avg > TEMPERATURE_HIGH:
        alerts.append(f"High CPU temperature: {point.temperature_avg:.1f}°C")

    if point.load_avg > LOAD_HIGH:
        alerts.append(f"High load average (1m): {point.load_avg:.2f}")

    if point.network_avg > NETWORK_HIGH:
        alerts.append(f"High network usage: {point.network_avg:.1f} MB/s")

    return alerts
