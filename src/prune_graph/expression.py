"""
Edge admission expressions.

An expression such as ``r2 > 0.2`` or ``(r2 > 0.2) and (dist < 50000)`` is
evaluated over the rounded weight fields of each row; field names from the
header are the free variables (back-quote names that are not identifiers,
e.g. ``\\`p-value\\` < 0.01``). A row is admitted iff the result is non-zero.

Evaluation goes through ``pandas.DataFrame.eval``, over all rows at once when
the builder has the whole table.
"""

from __future__ import annotations

from typing import Mapping

import numpy as np
import pandas as pd

from .errors import FatalInputError

_EVAL_ERRORS = (SyntaxError, NameError, KeyError, TypeError, ValueError, AttributeError, NotImplementedError)


class WeightFilter:
    def __init__(self, expression: str):
        expression = str(expression).strip()
        if not expression:
            raise FatalInputError("empty filter expression")
        self.expression = expression

    def __repr__(self) -> str:
        return f"WeightFilter({self.expression!r})"

    def _evaluate_frame(self, frame: pd.DataFrame) -> np.ndarray:
        try:
            result = frame.eval(self.expression, engine="python")
        except _EVAL_ERRORS as exc:
            raise FatalInputError(f"cannot evaluate expression '{self.expression}': {exc}") from None

        if isinstance(result, pd.DataFrame):
            raise FatalInputError(f"filter expression '{self.expression}' must compute a value, not assign one")
        if isinstance(result, pd.Series):
            values = result.to_numpy()
        else:
            # No field referenced (e.g. "1"): same value for every row.
            values = np.full(len(frame), np.asarray(result).item())

        try:
            return values.astype(np.float64)
        except (TypeError, ValueError):
            raise FatalInputError(f"filter expression '{self.expression}' does not evaluate to a number") from None

    def evaluate(self, record: Mapping[str, float]) -> float:
        frame = pd.DataFrame({str(k): [float(v)] for k, v in record.items()})
        return float(self._evaluate_frame(frame)[0])

    def admits(self, record: Mapping[str, float]) -> bool:
        return self.evaluate(record) != 0.0

    def admit_mask(self, columns: Mapping[str, np.ndarray]) -> np.ndarray:
        """Evaluate over every row of ``columns`` (field name -> 1-D array of equal length)."""
        frame = pd.DataFrame({str(k): np.asarray(v, dtype=np.float64) for k, v in columns.items()})
        return self._evaluate_frame(frame) != 0.0
