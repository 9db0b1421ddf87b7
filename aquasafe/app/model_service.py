"""Linear regression over accumulated (features, score) samples.

Weights are fitted with the normal equation ``w = (X'X)^-1 X'y``; the inverse
comes from Gauss-Jordan elimination with partial pivoting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .features import FEATURE_NAMES
from .records import TrainingSample
from .store import Store

logger = logging.getLogger(__name__)

MIN_FIT_SAMPLES = 3
SINGULAR_PIVOT = 1e-10


@dataclass(frozen=True)
class TrainingResult:
    ok: bool
    sample_count: int
    weights: list[float] = field(default_factory=list)
    reason: str | None = None


def matrix_inverse(matrix: Sequence[Sequence[float]]) -> list[list[float]] | None:
    """Gauss-Jordan inverse; ``None`` when a pivot falls below 1e-10."""
    n = len(matrix)
    a = [list(map(float, row)) for row in matrix]
    inv = [[1.0 if i == j else 0.0 for j in range(n)] for i in range(n)]

    for col in range(n):
        pivot = max(range(col, n), key=lambda r: abs(a[r][col]))
        a[col], a[pivot] = a[pivot], a[col]
        inv[col], inv[pivot] = inv[pivot], inv[col]

        div = a[col][col]
        if abs(div) < SINGULAR_PIVOT:
            return None
        a[col] = [v / div for v in a[col]]
        inv[col] = [v / div for v in inv[col]]

        for row in range(n):
            if row == col:
                continue
            factor = a[row][col]
            if factor == 0.0:
                continue
            a[row] = [v - factor * p for v, p in zip(a[row], a[col])]
            inv[row] = [v - factor * p for v, p in zip(inv[row], inv[col])]
    return inv


def fit_linear_model(samples: Sequence[TrainingSample]) -> list[float]:
    """Least-squares weights in feature order, or ``[]`` if underdetermined/singular."""
    if len(samples) < MIN_FIT_SAMPLES:
        return []

    dim = len(samples[0].features)
    xtx = [[0.0] * dim for _ in range(dim)]
    xty = [0.0] * dim
    for sample in samples:
        x = sample.features
        if len(x) != dim:
            continue
        for i in range(dim):
            xi = x[i]
            row = xtx[i]
            for j in range(dim):
                row[j] += xi * x[j]
            xty[i] += xi * sample.score

    inv = matrix_inverse(xtx)
    if inv is None:
        return []
    return [sum(inv[i][j] * xty[j] for j in range(dim)) for i in range(dim)]


def train(store: Store, min_samples: int = MIN_FIT_SAMPLES) -> TrainingResult:
    """Fit on every stored sample and persist the weights.

    Failures are returned, not raised; previously stored weights are left
    untouched unless a fit succeeds.
    """
    samples = [s for s in store.list_samples() if len(s.features) == len(FEATURE_NAMES)]
    count = len(samples)
    required = max(min_samples, MIN_FIT_SAMPLES)
    if count < required:
        logger.info("Training skipped: %d samples, need %d", count, required)
        return TrainingResult(
            ok=False,
            sample_count=count,
            reason=f"Need at least {required} samples to train (have {count}).",
        )

    weights = fit_linear_model(samples)
    if not weights:
        logger.info("Training failed: X'X is singular for %d samples", count)
        return TrainingResult(
            ok=False,
            sample_count=count,
            reason="Samples do not determine a unique fit (singular matrix).",
        )

    store.set_weights(weights)
    logger.info("Trained linear model on %d samples", count)
    return TrainingResult(ok=True, sample_count=count, weights=weights)
