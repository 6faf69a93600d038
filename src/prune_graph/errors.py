from __future__ import annotations


class FatalInputError(ValueError):
    """Structurally invalid input: no partial graph is usable, the run must stop."""
