"""Views and formatters for schedules."""

from .views import (
    StaffView,
    build_staff_view,
    class_view,
    class_options,
    teacher_load,
)
from .formatters import (
    CSVFormatter,
    class_table,
    staff_table,
    progress_table,
    collisions_table,
    render_text,
    save_json,
    save_csv,
)

__all__ = [
    # Views
    "StaffView",
    "build_staff_view",
    "class_view",
    "class_options",
    "teacher_load",
    # Formatters
    "CSVFormatter",
    "class_table",
    "staff_table",
    "progress_table",
    "collisions_table",
    "render_text",
    "save_json",
    "save_csv",
]
