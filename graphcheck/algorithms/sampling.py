import numpy as np


def select_random_vertices(rng, candidates, count=None):
    """Sorted sample of ``count`` distinct ``candidates`` (all of them when ``count`` is None).

    ``count`` larger than the candidate set is clamped.
    """
    candidates = np.asarray(candidates)
    if count is None or count >= len(candidates):
        return np.sort(candidates)
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    return np.sort(rng.choice(candidates, size=count, replace=False))


def seed_quota(num_seeds, rank, size):
    """This rank's share of ``num_seeds``; the remainder goes to the lowest ranks."""
    if num_seeds is None:
        return None
    return num_seeds // size + (1 if rank < num_seeds % size else 0)
