from __future__ import annotations

from dataclasses import dataclass

MODES = ("global", "component")


@dataclass(frozen=True)
class PruneConfig:
    # Input parsing
    header: bool = False
    weight_field: str = "column_3"
    weight_filter: str | None = None
    weight_n_edges: bool = False
    weight_precision: int = 4
    subset: str | None = None
    # Pruning
    keep_heavy: bool = False
    mode: str = "global"
    n_threads: int = 1
    # Files ("-" is stdin / stdout)
    input: str = "-"
    out: str = "-"
    out_excl: str | None = None
    out_graph: str | None = None

    def validate(self) -> "PruneConfig":
        if int(self.weight_precision) < 0:
            raise ValueError(f"weight_precision must be >= 0, got {self.weight_precision}")
        if int(self.n_threads) < 1:
            raise ValueError(f"n_threads must be >= 1, got {self.n_threads}")
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode!r} (expected one of {', '.join(MODES)})")
        if not str(self.weight_field).strip():
            raise ValueError("weight_field must not be empty")
        return self
