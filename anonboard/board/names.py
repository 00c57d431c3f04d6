"""Anonymous author tags."""

import random
from uuid import UUID


DEFAULT_PREFIX = "익명"
DEFAULT_MAX_SUFFIX = 1000


def generate_display_name(
    seed: UUID | int | str,
    prefix: str = DEFAULT_PREFIX,
    max_suffix: int = DEFAULT_MAX_SUFFIX,
) -> str:
    """Derive an anonymous display name such as ``익명417`` from ``seed``.

    The same seed always yields the same name; callers seed with the id of
    the entity being created so no generator state is shared between calls.
    """
    if isinstance(seed, UUID):
        seed = seed.int
    rng = random.Random(seed)
    return f"{prefix}{rng.randrange(max_suffix)}"
