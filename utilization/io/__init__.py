"""I/O utilities for CSV import/export."""

from .export_csv import export_technician_summaries_csv, export_trend_csv
from .import_csv import (
    import_appointments_csv,
    import_employees_csv,
    import_provinces_csv,
    import_sites_csv,
    import_ticket_employees_csv,
    import_tickets_csv,
    import_work_types_csv,
)

__all__ = [
    "import_employees_csv",
    "import_work_types_csv",
    "import_provinces_csv",
    "import_sites_csv",
    "import_appointments_csv",
    "import_tickets_csv",
    "import_ticket_employees_csv",
    "export_trend_csv",
    "export_technician_summaries_csv",
]
