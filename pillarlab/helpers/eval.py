# pillarlab/helpers/eval.py

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

import gymnasium as gym
from rich.progress import track

from pillarlab.agents.q_agent import ACTIONS, QAgent


@dataclass
class EvalResult:
    episode: int
    reward: float
    steps: int
    targets_destroyed: int
    elapsed_time: float
    success: bool


@contextmanager
def greedy(agent: QAgent):
    """Fuerza modo explotación (sin acciones aleatorias) y lo restaura al salir."""
    saved = (agent.epsilon, agent.min_epsilon)
    agent.epsilon, agent.min_epsilon = 0.0, 0.0
    try:
        yield agent
    finally:
        agent.epsilon, agent.min_epsilon = saved


def evaluate_agent(
    env: gym.Env,
    agent: QAgent,
    episodes: int,
    seed: Optional[int] = None,
    progress: bool = True,
) -> list[EvalResult]:
    """
    Evalúa un agente con la política voraz. No llama a `learn` ni a
    `complete_episode`, así que el progreso guardado no se modifica.
    """
    results: list[EvalResult] = []
    episodes_range = range(int(episodes))
    if progress:
        episodes_range = track(episodes_range, description="Evaluando...")

    with greedy(agent):
        for ep in episodes_range:
            obs, info = env.reset(seed=seed if ep == 0 else None)
            total, steps = 0.0, 0
            terminated, truncated = False, False
            while not (terminated or truncated):
                action = agent.choose_action(obs, info["targets"])
                obs, reward, terminated, truncated, info = env.step(ACTIONS.index(action))
                total += float(reward)
                steps += 1
            results.append(EvalResult(
                episode=ep + 1,
                reward=total,
                steps=steps,
                targets_destroyed=int(info["targets_destroyed"]),
                elapsed_time=float(info["elapsed_time"]),
                success=bool(terminated),
            ))
    return results
