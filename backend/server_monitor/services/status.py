"""Status classification for server room readings.

Two independent rules live here and must stay separate:

* ``classify_metric`` grades a single temperature or humidity value against
  its own comfort band. It drives the status badges next to averages and
  table cells.
* ``classify_record`` grades a whole reading by OR-ing the upper limits of
  both metrics. It drives alert distribution charts and the tier counts of
  monthly aggregates.

The bands differ (a 15 °C reading is Danger per metric but Normal per
record), and both behaviours are relied upon.
"""
from enum import Enum
from typing import Any


class Status(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    DANGER = "danger"


class Metric(str, Enum):
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"


AC_ISSUE_STATUSES = frozenset({"broken", "maintenance"})
UPS_ISSUE_STATUSES = frozenset({"broken", "maintenance", "low_battery"})

AC_LABELS = {"normal": "Normal", "maintenance": "Maintenance", "broken": "Broken"}
UPS_LABELS = {
    "normal": "Normal",
    "low_battery": "Low Battery",
    "maintenance": "Maintenance",
    "broken": "Broken",
}
FIRE_EXTINGUISHER_LABELS = {
    "ready": "Ready",
    "expired": "Expired",
    "needs_maintenance": "Needs Maintenance",
}


def classify_metric(value: float, metric: Metric | str) -> Status:
    metric = Metric(metric)

    if metric is Metric.TEMPERATURE:
        if 18 <= value <= 25:
            return Status.NORMAL
        if 25 < value <= 28:
            return Status.WARNING
        return Status.DANGER

    if 40 <= value <= 60:
        return Status.NORMAL
    if 30 < value < 40 or 60 < value <= 70:
        return Status.WARNING
    return Status.DANGER


def classify_record(temperature: float, humidity: float) -> Status:
    if temperature > 28 or humidity > 70:
        return Status.DANGER
    if temperature > 25 or humidity > 60:
        return Status.WARNING
    return Status.NORMAL


def is_alert(record: Any) -> bool:
    """Reading that counts towards the dashboard's active alert figure."""
    return (
        record.temperature > 25
        or record.humidity > 60
        or record.ac_status == "broken"
        or record.ups_status == "broken"
    )


def ac_badge(ac_status: str) -> Status:
    return Status.NORMAL if ac_status == "normal" else Status.DANGER


def ups_badge(ups_status: str) -> Status:
    if ups_status == "normal":
        return Status.NORMAL
    if ups_status == "low_battery":
        return Status.WARNING
    return Status.DANGER
