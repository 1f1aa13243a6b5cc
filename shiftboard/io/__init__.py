"""I/O utilities for CSV import/export."""

from .import_csv import (
    import_attendance_csv,
    import_preferences_csv,
    import_rankings_csv,
    import_staff_csv,
    import_time_off_csv,
)
from .export_csv import export_stats_csv, export_week_csv

__all__ = [
    "import_staff_csv",
    "import_time_off_csv",
    "import_attendance_csv",
    "import_rankings_csv",
    "import_preferences_csv",
    "export_week_csv",
    "export_stats_csv",
]
