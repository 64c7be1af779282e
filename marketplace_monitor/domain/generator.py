"""
Synthetic marketplace observation generator.

Every numeric field is drawn as `floor(random() * span) + base`, so the lower
bound is inclusive and the upper bound exclusive. Pass a seeded
`random.Random` for reproducible output.
"""

from __future__ import annotations

import math
import random
import time
from typing import Callable, Dict, Optional, Tuple

from marketplace_monitor.domain.models import CATEGORIES, MarketplaceObservation

# field -> (base, span)
FIELD_RANGES: Dict[str, Tuple[int, int]] = {
    "active_deals": (50, 200),
    "new_deals": (0, 10),
    "average_deal_value_usd": (5000, 50000),
    "offers_submitted": (0, 30),
    "user_views": (0, 500),
}


_default_rng = random.Random()


def _draw(rng: random.Random, base: int, span: int) -> int:
    return math.floor(rng.random() * span) + base


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_observation(
    rng: Optional[random.Random] = None,
    clock: Optional[Callable[[], int]] = None,
) -> MarketplaceObservation:
    """
    Produce one random, range-constrained marketplace observation.

    Parameters
    ----------
    rng : random.Random | None
        Source of randomness. Defaults to the module-level generator.
    clock : callable | None
        Returns the current time in epoch milliseconds.
    """
    source = rng or _default_rng
    fields = {name: _draw(source, base, span) for name, (base, span) in FIELD_RANGES.items()}
    category = CATEGORIES[math.floor(source.random() * len(CATEGORIES))]
    return MarketplaceObservation(
        timestamp=(clock or _now_ms)(),
        category=category,
        **fields,
    )


__all__ = ["FIELD_RANGES", "generate_observation"]
