"""engine/config.py - Game configuration."""

from __future__ import annotations
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

ENV_PREFIX = "HYPERGO_"


@dataclass(frozen=True)
class GameConfig:
    """Everything needed to build a board and run a session."""
    geometry: str = "hyperbolic"
    edge_len: int = 9                  # points across the board, must be odd
    sides: int = 5
    around_vertex: int = 4
    hover_tolerance: float = 0.4       # select / hover radius, geometric units
    dedup_tolerance: float = 1e-3      # coincidence radius during generation
    recenter_threshold: float = 2.0    # viewpoint drift before recentering
    max_points: int = 4096             # hard ceiling on generated points
    history_factor: int = 4            # initial history capacity = points × factor
    enable_timing: bool = False

    @property
    def rings(self) -> int:
        return self.edge_len // 2

    def with_overrides(self, **overrides: Any) -> "GameConfig":
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GameConfig":
        """Read ``HYPERGO_<FIELD>`` variables, e.g. ``HYPERGO_EDGE_LEN=7``."""
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            if f.type in (bool, "bool"):
                values[f.name] = raw.strip().lower() in ("1", "true", "yes", "on")
            elif f.type in (int, "int"):
                values[f.name] = int(raw)
            elif f.type in (float, "float"):
                values[f.name] = float(raw)
            else:
                values[f.name] = raw
        return cls(**values)
