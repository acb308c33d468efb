# pillarlab/agents/rewards.py
"""
Función de recompensa de la arena de pilares.

Pequeño coste por paso, castigo fuerte por quedarse quieto y un término de
"shaping" que premia acercarse al pilar más cercano (más cuanto más cerca se
está). El bonus por destruir un pilar lo aplica el entorno, que sustituye la
recompensa del paso por COLLISION_REWARD.
"""

from __future__ import annotations

from typing import Sequence

from .state import Position, nearest_target

STEP_COST = -0.05
STALL_PENALTY = -2.0
STALL_EPSILON = 0.01
PROGRESS_SCALE = 10.0
# Divisor mínimo: limita el shaping a PROGRESS_SCALE / MIN_DISTANCE
MIN_DISTANCE = 0.5
COLLISION_REWARD = 50.0


def progress_bonus(distance: float) -> float:
    return max(PROGRESS_SCALE / max(distance, MIN_DISTANCE), 1.0)


def compute_reward(
    next_position: Position,
    previous_position: Position,
    targets: Sequence[Position],
) -> float:
    reward = STEP_COST

    # Sin movimiento: penalización y salimos sin shaping
    if (
        abs(next_position[0] - previous_position[0]) < STALL_EPSILON
        and abs(next_position[2] - previous_position[2]) < STALL_EPSILON
    ):
        return reward + STALL_PENALTY

    _, new_dist = nearest_target(next_position, targets)
    _, old_dist = nearest_target(previous_position, targets)

    if new_dist < old_dist:
        reward += progress_bonus(new_dist)
    elif new_dist > old_dist:
        reward -= progress_bonus(new_dist)

    return reward
