"""Data models, loading and sample generation."""

from .models import (
    Allocation,
    Grid,
    SchoolData,
    SessionLabel,
    Setup,
    SubjectAllocation,
    clone_grid,
    count_label,
    init_grid_structure,
    iter_cells,
    normalize_grid,
    parse_label,
)
from .loader import JsonStore, LoadReport, load_school_data, validate_school_data, to_json
from .generator import (
    GeneratorConfig,
    generate_sample_school,
    generate_small_school,
    generate_medium_school,
    get_generation_stats,
)

__all__ = [
    # Models
    "Allocation",
    "Grid",
    "SchoolData",
    "SessionLabel",
    "Setup",
    "SubjectAllocation",
    # Grid helpers
    "clone_grid",
    "count_label",
    "init_grid_structure",
    "iter_cells",
    "normalize_grid",
    "parse_label",
    # Loader
    "JsonStore",
    "LoadReport",
    "load_school_data",
    "validate_school_data",
    "to_json",
    # Generator
    "GeneratorConfig",
    "generate_sample_school",
    "generate_small_school",
    "generate_medium_school",
    "get_generation_stats",
]
