"""Base class for seeded generators."""

from __future__ import annotations

import random


class BaseGenerator:
    """Holds the random source shared by a generator and its helpers.

    Pass ``seed`` for reproducible output, or an existing ``rng`` to share one
    random stream between cooperating generators.
    """

    def __init__(self, seed: int | None = None, rng: random.Random | None = None):
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)
