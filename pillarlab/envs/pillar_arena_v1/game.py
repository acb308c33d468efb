# pillarlab/envs/pillar_arena_v1/game.py
import math

import numpy as np

from pillarlab.agents.rewards import COLLISION_REWARD, compute_reward
from pillarlab.agents.state import planar_distance

# Desplazamiento (dx, dz) por acción; 'up' avanza hacia -Z
ACTION_DELTAS = {
    "up": (0.0, -1.0),
    "down": (0.0, 1.0),
    "left": (-1.0, 0.0),
    "right": (1.0, 0.0),
    "none": (0.0, 0.0),
}


def ring_positions(count: int, radius: float, height: float) -> list[tuple[float, float, float]]:
    """Pilares repartidos uniformemente en un anillo alrededor del origen."""
    positions = []
    for i in range(count):
        angle = (i / count) * math.pi * 2
        positions.append((math.cos(angle) * radius, height, math.sin(angle) * radius))
    return positions


class ArenaGame:
    """
    Lógica del juego (estado y transición), sin dependencias de UI.
    La plataforma es plana; la Y del personaje se conserva tal cual.
    """

    def __init__(self, num_pillars: int = 8, ring_radius: float = 4.0, pillar_height: float = 0.75,
                 bounds: float = 4.0, speed: float = 0.5, agent_radius: float = 0.75,
                 hit_margin: float = 0.3, score_per_pillar: int = 100) -> None:
        self.num_pillars = int(num_pillars)
        self.ring_radius = float(ring_radius)
        self.pillar_height = float(pillar_height)
        self.bounds = float(bounds)
        self.speed = float(speed)
        self.agent_radius = float(agent_radius)
        self.hit_margin = float(hit_margin)
        self.score_per_pillar = int(score_per_pillar)

        self.agent_pos = np.zeros(3, dtype=np.float64)
        self.pillars: list[tuple[float, float, float]] = []
        self.destroyed: list[tuple[float, float, float]] = []
        self.last_action = "none"
        self.reset()

    def reset(self, start=(0.0, 0.0, 0.0)) -> None:
        self.agent_pos = np.array(start, dtype=np.float64)
        self.pillars = ring_positions(self.num_pillars, self.ring_radius, self.pillar_height)
        self.destroyed = []
        self.last_action = "none"

    @property
    def remaining(self) -> list[tuple[float, float, float]]:
        return [p for p in self.pillars if p not in self.destroyed]

    @property
    def score(self) -> int:
        """Puntuación del episodio: una cantidad fija por pilar destruido."""
        return len(self.destroyed) * self.score_per_pillar

    @property
    def hit_distance(self) -> float:
        return self.agent_radius + self.hit_margin

    def get_obs(self) -> np.ndarray:
        return self.agent_pos.astype(np.float32)

    def step(self, action: str) -> tuple[np.ndarray, float, bool, dict]:
        if action not in ACTION_DELTAS:
            raise ValueError(f"Acción desconocida: {action!r}")
        self.last_action = action
        targets = self.remaining
        previous = tuple(float(v) for v in self.agent_pos)

        dx, dz = ACTION_DELTAS[action]
        nx = float(np.clip(previous[0] + dx * self.speed, -self.bounds, self.bounds))
        nz = float(np.clip(previous[2] + dz * self.speed, -self.bounds, self.bounds))
        new_pos = (nx, previous[1], nz)
        self.agent_pos[:] = new_pos

        reward = compute_reward(new_pos, previous, targets)

        # Como mucho un pilar por paso
        reached = None
        for pillar in targets:
            if planar_distance(new_pos, pillar) < self.hit_distance:
                reached = pillar
                break

        info: dict = {"target_reached": reached}
        if reached is not None:
            self.destroyed.append(reached)
            reward = COLLISION_REWARD

        terminated = len(self.destroyed) == self.num_pillars
        info["targets_destroyed"] = len(self.destroyed)
        info["score"] = self.score
        return self.get_obs(), float(reward), terminated, info
