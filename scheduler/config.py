"""Engine configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_MAX_ATTEMPTS = 100
DEFAULT_DATA_FILE = Path("data") / "school_data.json"

_TRUE_VALUES = ("1", "true", "yes", "on")


class EngineConfig(BaseModel):
    """Tunables for the auto-fill pipeline."""
    model_config = ConfigDict(extra="forbid")

    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1, description="Randomized attempts before giving up")
    seed: Optional[int] = Field(default=None, description="Random seed for reproducible runs")
    cpsat_fallback: bool = Field(default=False, description="Try CP-SAT after the randomized search is exhausted")
    cpsat_time_limit: float = Field(default=10.0, gt=0, le=3600, description="CP-SAT time limit in seconds")

    @classmethod
    def from_env(cls, **overrides) -> "EngineConfig":
        """
        Build a config from ``SCHEDULER_*`` environment variables.

        Keyword arguments that are not ``None`` take precedence over the
        environment.
        """
        values: dict = {}

        if os.environ.get("SCHEDULER_MAX_ATTEMPTS"):
            values["max_attempts"] = int(os.environ["SCHEDULER_MAX_ATTEMPTS"])
        if os.environ.get("SCHEDULER_SEED"):
            values["seed"] = int(os.environ["SCHEDULER_SEED"])
        if os.environ.get("SCHEDULER_CPSAT_FALLBACK"):
            values["cpsat_fallback"] = os.environ["SCHEDULER_CPSAT_FALLBACK"].lower() in _TRUE_VALUES
        if os.environ.get("SCHEDULER_CPSAT_TIME_LIMIT"):
            values["cpsat_time_limit"] = float(os.environ["SCHEDULER_CPSAT_TIME_LIMIT"])

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)


def default_data_file() -> Path:
    """Location of the school data document."""
    return Path(os.environ.get("SCHEDULER_DATA_FILE", DEFAULT_DATA_FILE))
