# pillarlab/envs/pillar_arena_v1/env.py

import gymnasium as gym
from gymnasium import spaces
import numpy as np

from pillarlab.agents.q_agent import ACTIONS

from .game import ArenaGame


class PillarArenaEnv(gym.Env):
    """
    Arena con ocho pilares en anillo. El personaje se mueve en el plano XZ y
    destruye un pilar al tocarlo. El episodio termina al destruirlos todos.

    La acción es un índice sobre ACTIONS (up, down, left, right, none) y la
    observación es la posición (x, y, z) del personaje.
    """
    metadata = {"render_modes": ["ansi"], "render_fps": 60}

    def __init__(self,
                 render_mode=None,
                 num_pillars=8,
                 ring_radius=4.0,
                 bounds=4.0,
                 speed=0.5,
                 agent_radius=0.75,
                 random_start=False,
                 ):
        super().__init__()
        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode

        self._game = ArenaGame(
            num_pillars=num_pillars,
            ring_radius=ring_radius,
            bounds=bounds,
            speed=speed,
            agent_radius=agent_radius,
        )
        self.random_start = bool(random_start)
        self._steps = 0

        # Espacios de acción y observación
        self.action_space = spaces.Discrete(len(ACTIONS))
        self.observation_space = spaces.Box(
            low=-float(bounds), high=float(bounds), shape=(3,), dtype=np.float32
        )

    @property
    def elapsed_time(self) -> float:
        """Tiempo simulado en segundos (un paso = un fotograma)."""
        return self._steps / float(self.metadata["render_fps"])

    def _get_info(self, extra=None):
        info = {
            "targets": self._game.remaining,
            "targets_destroyed": len(self._game.destroyed),
            "score": self._game.score,
            "elapsed_time": self.elapsed_time,
        }
        if extra:
            info.update(extra)
        return info

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)
        start = (0.0, 0.0, 0.0)
        random_start = self.random_start
        if options and "random_start" in options:
            random_start = bool(options["random_start"])
        if random_start:
            b = self._game.bounds
            x, z = self.np_random.uniform(-b, b, size=2)
            start = (float(x), 0.0, float(z))
        self._game.reset(start)
        self._steps = 0
        return self._game.get_obs(), self._get_info({"target_reached": None})

    def step(self, action):
        action_name = ACTIONS[int(action)]
        obs, reward, terminated, game_info = self._game.step(action_name)
        self._steps += 1
        info = self._get_info(game_info)
        # La truncación la gestiona el TimeLimit de gymnasium (max_episode_steps)
        return obs, reward, terminated, False, info

    def render(self):
        if self.render_mode != "ansi":
            return None
        x, _, z = self._game.agent_pos
        return (f"pos=({x:.2f}, {z:.2f}) "
                f"pilares={len(self._game.destroyed)}/{self._game.num_pillars} "
                f"t={self.elapsed_time:.2f}s acción={self._game.last_action}")
