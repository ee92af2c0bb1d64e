"""CSV export of computed report rows."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import pandas as pd

TREND_COLUMNS = [
    "date",
    "label",
    "active_technicians",
    "total_tickets_assigned",
    "total_tickets_confirmed",
    "utilization_rate",
    "confirmation_rate",
    "avg_tickets_per_technician",
]

TECHNICIAN_SUMMARY_COLUMNS = [
    "employee_id",
    "employee_name",
    "employee_code",
    "role_code",
    "tickets_assigned",
    "tickets_confirmed",
    "days_active",
    "utilization_rate",
    "avg_tickets_per_day",
    "key_employee_count",
]


def export_trend_csv(trend: Dict[str, object], csv_path: str | Path) -> int:
    """
    Write the data points of a trend report to CSV.
    
    Returns:
        Number of rows written
    """
    df = pd.DataFrame(trend["data_points"], columns=TREND_COLUMNS)
    df.to_csv(csv_path, index=False)
    return len(df)


def export_technician_summaries_csv(rows: List[Dict[str, object]], csv_path: str | Path) -> int:
    """Write range-summary technician rows to CSV."""
    df = pd.DataFrame(rows, columns=TECHNICIAN_SUMMARY_COLUMNS)
    df.to_csv(csv_path, index=False)
    return len(df)
