"""
Zabbix MCP Server Type Definitions

Contains enums and helpers for Zabbix object fields that the API returns as
numeric strings, so tool output carries readable labels.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class TriggerSeverity(Enum):
    """
    Trigger and problem severity levels.

    The API reports severity as a string digit ("0".."5").
    """
    NOT_CLASSIFIED = 0
    INFORMATION = 1
    WARNING = 2
    AVERAGE = 3
    HIGH = 4
    DISASTER = 5

    @classmethod
    def label(cls, value: Any) -> str:
        """Get the human-readable name for a raw severity value."""
        try:
            return cls(int(value)).name.replace("_", " ").title()
        except (TypeError, ValueError):
            return f"Unknown severity: {value}"

    @classmethod
    def parse(cls, name: str) -> "TriggerSeverity":
        """Parse 'high', 'not classified' or '4' into a severity."""
        if str(name).isdigit():
            return cls(int(name))
        return cls[str(name).strip().upper().replace(" ", "_")]


class HostStatus(Enum):
    MONITORED = 0
    UNMONITORED = 1

    @classmethod
    def label(cls, value: Any) -> str:
        try:
            return cls(int(value)).name.lower()
        except (TypeError, ValueError):
            return "unknown"


def annotate_severity(records: List[Dict[str, Any]], field: str = "severity") -> List[Dict[str, Any]]:
    """Return copies of records with a ``severity_label`` next to the raw severity."""
    return [
        {**record, "severity_label": TriggerSeverity.label(record[field])}
        if isinstance(record, dict) and field in record else record
        for record in records
    ]


def severity_summary(records: List[Dict[str, Any]], field: str = "severity") -> Dict[str, int]:
    """
    Count records per severity label.

    Args:
        records: Problems or triggers as returned by the API

    Returns:
        Mapping of severity label to count, in severity order
    """
    counts: Dict[str, int] = {}
    for severity in TriggerSeverity:
        counts[TriggerSeverity.label(severity.value)] = 0
    for record in records:
        label = TriggerSeverity.label(record.get(field))
        counts[label] = counts.get(label, 0) + 1
    return counts


def severities_to_values(severities: Optional[List[str]]) -> Optional[List[int]]:
    if not severities:
        return None
    return [TriggerSeverity.parse(s).value for s in severities]
