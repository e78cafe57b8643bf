"""Course progress tracking.

Provides:
- CourseProgress records created at enrollment time
"""

from .models import PROGRESS_TABLES_CQL, CourseProgress
from .service import ProgressService


__all__ = [
    "PROGRESS_TABLES_CQL",
    "CourseProgress",
    "ProgressService",
]
