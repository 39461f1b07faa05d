from __future__ import annotations

import random
from typing import Sequence, TypeVar

T = TypeVar("T")

_default_rng = random.Random()


def shuffled(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    # random.Random.shuffle is an in-place Fisher-Yates shuffle.
    result = list(items)
    (rng or _default_rng).shuffle(result)
    return result
