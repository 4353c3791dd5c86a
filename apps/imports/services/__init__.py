"""
Imports services.

Usage:
    from apps.imports.services import stage_csv, run_children_import
"""

from .exceptions import (
    ImportsServiceError,
    InvalidCSVError,
    ImportRowError,
)
from .staging import (
    stage_csv,
    get_import_stats,
    list_import_rows,
)
from .children_import import (
    run_children_import,
    reset_children_import,
    fix_contact_data,
)
from .trips_import import (
    run_trips_import,
    reset_trips_import,
)

__all__ = [
    # Exceptions
    'ImportsServiceError',
    'InvalidCSVError',
    'ImportRowError',
    # Staging
    'stage_csv',
    'get_import_stats',
    'list_import_rows',
    # Children
    'run_children_import',
    'reset_children_import',
    'fix_contact_data',
    # Trips
    'run_trips_import',
    'reset_trips_import',
]
