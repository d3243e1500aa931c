from .centrality import KERNELS, betweenness_centrality, weighted_out_degree
from .sampling import seed_quota, select_random_vertices

__all__ = [
    "KERNELS",
    "betweenness_centrality",
    "seed_quota",
    "select_random_vertices",
    "weighted_out_degree",
]
