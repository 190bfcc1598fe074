"""I/O utilities for CSV import/export."""

from .export_csv import write_blocks_csv
from .import_csv import (
    import_blackouts_csv,
    import_blocks_csv,
    import_feedback_csv,
    import_fixed_events_csv,
    import_tasks_csv,
)

__all__ = [
    "import_tasks_csv",
    "import_fixed_events_csv",
    "import_blackouts_csv",
    "import_blocks_csv",
    "import_feedback_csv",
    "write_blocks_csv",
]
