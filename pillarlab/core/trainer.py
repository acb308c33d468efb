from __future__ import annotations

from typing import Callable, Optional

import gymnasium as gym
from rich.progress import track

from pillarlab.agents.q_agent import ACTIONS, EpisodeMetrics, QAgent
from pillarlab.core.records import RecordBook

# Llamada opcional tras cada episodio: (número de episodio, métricas)
EpisodeCallback = Callable[[int, EpisodeMetrics], None]


class Trainer:
    """Orquesta el bucle por pasos entre el entorno y el agente Q-Learning."""

    def __init__(self, env: gym.Env, agent: QAgent, on_episode_end: Optional[EpisodeCallback] = None,
                 records: Optional[RecordBook] = None):
        """
        Args:
            env: Entorno de Gymnasium (PillarArena o compatible: acciones indexadas
                 como ACTIONS e `info["targets"]` con los pilares restantes).
            agent: El agente que aprenderá.
            on_episode_end: Callback opcional al completar cada episodio.
            records: Tabla de récords donde registrar los episodios completados.
        """
        self.env = env
        self.agent = agent
        self.on_episode_end = on_episode_end
        self.records = records
        self.new_records = 0

    def run_episode(self, seed: Optional[int] = None) -> EpisodeMetrics:
        obs, info = self.env.reset(seed=seed)
        targets = list(info["targets"])
        terminated, truncated = False, False

        while not (terminated or truncated):
            action = self.agent.choose_action(obs, targets)
            next_obs, reward, terminated, truncated, info = self.env.step(ACTIONS.index(action))

            # Se aprende con los objetivos vigentes antes del paso
            self.agent.learn(obs, action, reward, next_obs, targets)
            if info.get("target_reached") is not None:
                self.agent.record_target_reached()

            obs = next_obs
            targets = list(info["targets"])

        finished = self.agent.complete_episode(success=terminated, elapsed_time=info["elapsed_time"])
        if self.records is not None and self.records.submit(
                success=terminated, elapsed_time=info["elapsed_time"],
                score=info.get("score", 0), episode=self.agent.episode_count):
            self.new_records += 1
        return finished

    def train(self, episodes: int, seed: Optional[int] = None, progress: bool = True) -> list[EpisodeMetrics]:
        episodes_range = range(int(episodes))
        if progress:
            episodes_range = track(episodes_range, description="Entrenando...")

        results = []
        for i in episodes_range:
            # La semilla solo en el primer reset; el resto sigue la secuencia del entorno
            result = self.run_episode(seed=seed if i == 0 else None)
            results.append(result)
            if self.on_episode_end is not None:
                self.on_episode_end(self.agent.episode_count, result)
        return results
