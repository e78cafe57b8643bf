"""Courses as seen by the enrollment flow."""

from .models import COURSES_TABLES_CQL, Course
from .service import CourseNotFoundError, CourseService


__all__ = [
    "COURSES_TABLES_CQL",
    "Course",
    "CourseNotFoundError",
    "CourseService",
]
