import random
import time
from typing import List, Optional

from delfos.errors import InvalidCount, InvalidInput
from delfos.models import Profile


def select_question_ids(profile: Profile, count, rng: Optional[random.Random] = None) -> List[str]:
    """Draw ``count`` distinct question IDs from ``profile``.

    Rejection sampling: draw an ordinal in [1, size], keep it only if it has
    not been drawn yet. IDs come back in the order they were accepted.
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidInput(f"count must be an integer, got {count!r}")
    if count < 1 or count > profile.size:
        raise InvalidCount(f"count must be between 1 and {profile.size} for profile {profile.name}, got {count}")

    if rng is None:
        rng = random.Random(time.time_ns())

    used = set()
    ordinals: List[int] = []
    while len(ordinals) < count:
        n = rng.randint(1, profile.size)
        if n in used:
            continue
        used.add(n)
        ordinals.append(n)
    return [profile.question_id(n) for n in ordinals]
