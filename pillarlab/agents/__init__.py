from .q_agent import ACTIONS, EpisodeMetrics, PerformanceMetrics, QAgent
from .rewards import compute_reward
from .state import encode_state, nearest_target

__all__ = [
    "ACTIONS",
    "EpisodeMetrics",
    "PerformanceMetrics",
    "QAgent",
    "compute_reward",
    "encode_state",
    "nearest_target",
]
