"""Entrenamiento y evaluación baseline para pillar/PillarArena-v1 con Q-Learning tabular.

Este módulo implementa las funciones `train_agent` y `eval_agent` que la CLI
espera encontrar según la configuración BASELINE del entorno.
"""

from pathlib import Path
from typing import Optional

import gymnasium as gym
import numpy as np

import pillarlab  # noqa: F401  (registra los entornos "pillar/...")
from pillarlab.agents.q_agent import QAgent
from pillarlab.core.records import RecordBook
from pillarlab.core.trainer import Trainer
from pillarlab.helpers.console import console
from pillarlab.helpers.eval import EvalResult, evaluate_agent
from pillarlab.storage import JsonFileStore, MemoryStore


def build_agent(config: dict, store, seed: Optional[int] = None) -> QAgent:
    """Crea el agente con los hiperparámetros de la configuración."""
    return QAgent(
        store=store,
        rng=np.random.default_rng(seed),
        learning_rate=float(config.get("alpha", 0.1)),
        discount_factor=float(config.get("gamma", 0.9)),
        epsilon=float(config.get("epsilon", 0.1)),
        min_epsilon=float(config.get("min_epsilon", 0.01)),
        decay_horizon=int(config.get("decay_horizon", 1000)),
        save_every=int(config.get("save_every", 100)),
    )


def record_name(env_id: str) -> str:
    """Nombre bajo el que se guardan los récords del entorno (p.ej. 'PillarArena-v1')."""
    return env_id.split("/")[-1]

# --- Función de Entrenamiento Estandarizada (Contrato para la CLI) ---


def train_agent(
    env_id: str,
    config: dict,
    run_dir: Path,
    seed: Optional[int] = None,
) -> QAgent:
    """
    Entrena un agente Q-Learning y guarda su progreso en la carpeta del 'run'.
    Si la carpeta ya tiene progreso, el entrenamiento continúa desde ahí.
    """
    total_episodes = int(config["episodes"])
    store = JsonFileStore(run_dir)
    agent = build_agent(config, store, seed)
    records = RecordBook(store, record_name(env_id))
    if agent.episode_count:
        console.print(
            f"🧠 Reanudando desde el episodio [bold]{agent.episode_count}[/bold] "
            f"({len(agent.q_table)} estados aprendidos).")

    env = gym.make(env_id)
    try:
        trainer = Trainer(env, agent, records=records)
        trainer.train(total_episodes, seed=seed)
    finally:
        env.close()

    best = records.best()
    if trainer.new_records and best is not None:
        console.print(
            f"🏆 Nuevo récord: [bold]{best.time:.2f}s[/bold] (episodio {best.episode}).")

    console.print(f"✅ Entrenamiento completado. Progreso guardado en {run_dir}")
    return agent


def eval_agent(
    env_id: str,
    run_dir: Path,
    episodes: int,
    seed: Optional[int] = None,
    config: Optional[dict] = None,
) -> list[EvalResult]:
    """
    Carga el progreso de un 'run' y evalúa al agente sin modificarlo.
    """
    agent = build_agent(config or {}, JsonFileStore(run_dir), seed)
    # A partir de aquí el agente no escribe en la carpeta del 'run'
    agent.store = MemoryStore()

    env = gym.make(env_id)
    try:
        return evaluate_agent(env, agent, episodes, seed=seed)
    finally:
        env.close()
