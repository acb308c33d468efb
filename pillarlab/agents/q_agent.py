# pillarlab/agents/q_agent.py
"""
Agente Q-Learning tabular para la arena de pilares.

La tabla Q es un diccionario de diccionarios: clave de estado -> acción -> valor.
Las entradas se crean al escribir; leer una entrada ausente devuelve 0.0 sin
materializarla. El progreso (tabla, histórico de métricas y número de
episodios) se persiste en un almacén clave/valor cada `save_every` pasos de
aprendizaje y al completar cada episodio.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Optional, Sequence

import numpy as np

from pillarlab.helpers.console import console
from pillarlab.storage import KeyValueStore, MemoryStore
from .state import Position, encode_state

ACTIONS: tuple[str, ...] = ("up", "down", "left", "right", "none")

PROGRESS_KEY = "qagent_progress"
HISTORY_SIZE = 100
METRICS_WINDOW = 10


@dataclass
class EpisodeMetrics:
    episode_reward: float = 0.0
    episode_steps: int = 0
    targets_reached: int = 0
    completion_time: float = 0.0
    success: bool = False


@dataclass
class PerformanceMetrics:
    episode_count: int
    average_reward: float
    average_steps: float
    average_time: float
    average_targets: float
    success_rate: float
    epsilon: float


class QAgent:
    """
    Un agente que aprende a destruir pilares usando el algoritmo Q-Learning.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        rng: Any = None,
        learning_rate: float = 0.1,
        discount_factor: float = 0.9,
        epsilon: float = 0.1,
        min_epsilon: float = 0.01,
        decay_horizon: int = 1000,
        save_every: int = 100,
        history_size: int = HISTORY_SIZE,
    ):
        """
        Args:
            store: Almacén clave/valor para el progreso. Por defecto, en memoria.
            rng: Fuente aleatoria con `random()` e `integers(n)`
                 (p.ej. `np.random.default_rng(seed)`).
            learning_rate: Tasa de aprendizaje (alpha).
            discount_factor: Factor de descuento (gamma).
            epsilon: Tasa de exploración base.
            min_epsilon: Suelo de exploración; nunca se explota al 100%.
            decay_horizon: Episodios en los que epsilon decae linealmente.
            save_every: Cada cuántas llamadas a `learn` se guarda el progreso.
        """
        if decay_horizon <= 0:
            raise ValueError("decay_horizon debe ser positivo")
        self.store = store if store is not None else MemoryStore()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.learning_rate = learning_rate
        self.discount_factor = discount_factor
        self.epsilon = epsilon
        self.min_epsilon = min_epsilon
        self.decay_horizon = decay_horizon
        self.save_every = save_every

        self.q_table: dict[str, dict[str, float]] = {}
        self.metrics: deque[EpisodeMetrics] = deque(maxlen=history_size)
        self.episode_count = 0
        self.current_episode = EpisodeMetrics()
        self._learn_calls = 0

        # Cargar una tabla Q aprendida previamente si existe
        self.load_progress()

    # --- Tabla Q ---

    def get_q_value(self, state: str, action: str) -> float:
        return self.q_table.get(state, {}).get(action, 0.0)

    def set_q_value(self, state: str, action: str, value: float) -> None:
        self.q_table.setdefault(state, {})[action] = float(value)

    def best_action(self, state: str) -> str:
        """Acción de mayor valor; los empates se resuelven por el orden de ACTIONS."""
        row = self.q_table.get(state, {})
        best, best_value = ACTIONS[-1], -np.inf
        for action in ACTIONS:
            value = row.get(action, 0.0)
            if value > best_value:
                best, best_value = action, value
        return best

    # --- Política ---

    def effective_epsilon(self) -> float:
        """Exploración actual, recalculada a partir del número de episodios."""
        decayed = self.epsilon * (1 - self.episode_count / self.decay_horizon)
        return max(self.min_epsilon, decayed)

    def choose_action(self, position: Position, targets: Sequence[Position]) -> str:
        """
        Política epsilon-greedy:
        - Con probabilidad epsilon, una acción al azar (exploración).
        - Si no, la mejor acción conocida para el estado (explotación).
        """
        if self.rng.random() < self.effective_epsilon():
            return ACTIONS[int(self.rng.integers(len(ACTIONS)))]
        return self.best_action(encode_state(position, targets))

    # --- Aprendizaje ---

    def learn(
        self,
        old_position: Position,
        action: str,
        reward: float,
        new_position: Position,
        targets: Sequence[Position],
    ) -> None:
        if action not in ACTIONS:
            raise ValueError(f"Acción desconocida: {action!r}")

        old_state = encode_state(old_position, targets)
        new_state = encode_state(new_position, targets)

        current_q = self.get_q_value(old_state, action)
        max_next_q = max(self.get_q_value(new_state, a) for a in ACTIONS)

        # La fórmula central de Q-Learning
        new_q = current_q + self.learning_rate * (
            reward + self.discount_factor * max_next_q - current_q
        )
        self.set_q_value(old_state, action, new_q)

        self.current_episode.episode_reward += reward
        self.current_episode.episode_steps += 1

        self._learn_calls += 1
        if self.save_every > 0 and self._learn_calls % self.save_every == 0:
            self.save_progress()

    # --- Episodios ---

    def record_target_reached(self) -> None:
        self.current_episode.targets_reached += 1

    def complete_episode(self, success: bool, elapsed_time: float) -> EpisodeMetrics:
        finished = self.current_episode
        finished.completion_time = float(elapsed_time)
        finished.success = bool(success)
        # El deque descarta el episodio más antiguo al superar el tamaño
        self.metrics.append(finished)

        self.episode_count += 1
        self.current_episode = EpisodeMetrics()
        self.save_progress()
        return finished

    def get_performance_metrics(self) -> Optional[PerformanceMetrics]:
        if not self.metrics:
            return None

        window = list(self.metrics)[-METRICS_WINDOW:]
        return PerformanceMetrics(
            episode_count=self.episode_count,
            average_reward=float(np.mean([m.episode_reward for m in window])),
            average_steps=float(np.mean([m.episode_steps for m in window])),
            average_time=float(np.mean([m.completion_time for m in window])),
            average_targets=float(np.mean([m.targets_reached for m in window])),
            success_rate=float(np.mean([m.success for m in window])),
            epsilon=self.effective_epsilon(),
        )

    # --- Persistencia ---

    def to_payload(self) -> dict:
        return {
            "q_table": [
                [state, [[action, value] for action, value in row.items()]]
                for state, row in self.q_table.items()
            ],
            "metrics": [asdict(m) for m in self.metrics],
            "episode_count": self.episode_count,
        }

    def save_progress(self) -> None:
        try:
            self.store.save(PROGRESS_KEY, self.to_payload())
        except Exception as e:
            # La tabla en memoria sigue siendo la fuente de verdad
            console.print(
                f"⚠️ [yellow]No se pudo guardar el progreso del agente:[/yellow] {e}")

    def load_progress(self) -> bool:
        """Restaura el progreso guardado. Devuelve False si se arranca en frío."""
        try:
            data = self.store.load(PROGRESS_KEY)
        except Exception as e:
            console.print(
                f"⚠️ [yellow]No se pudo cargar el progreso del agente:[/yellow] {e}")
            return False
        if data is None:
            return False

        parsed = parse_payload(data)
        if parsed is None:
            console.print(
                "⚠️ [yellow]Progreso guardado con formato inválido; se empieza de cero.[/yellow]")
            return False

        q_table, metrics, episode_count = parsed
        self.q_table = q_table
        self.metrics.clear()
        self.metrics.extend(metrics)
        self.episode_count = episode_count
        return True


def _is_number(value: Any) -> bool:
    # Solo números finitos: un NaN o inf se propagaría por max_next_q
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # Enteros demasiado grandes para un float
        return False


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _parse_metrics(item: Any) -> Optional[EpisodeMetrics]:
    if not isinstance(item, dict):
        return None
    reward = item.get("episode_reward")
    steps = item.get("episode_steps")
    targets = item.get("targets_reached", 0)
    elapsed = item.get("completion_time", 0.0)
    success = item.get("success", False)
    if not (_is_number(reward) and _is_count(steps) and _is_count(targets)
            and _is_number(elapsed) and isinstance(success, bool)):
        return None
    return EpisodeMetrics(
        episode_reward=float(reward),
        episode_steps=steps,
        targets_reached=targets,
        completion_time=float(elapsed),
        success=success,
    )


def parse_payload(data: Any) -> Optional[tuple[dict[str, dict[str, float]], list[EpisodeMetrics], int]]:
    """
    Valida la forma del progreso guardado antes de reconstruir nada.
    Devuelve None si el payload no es utilizable.
    """
    if not isinstance(data, dict):
        return None

    raw_table = data.get("q_table")
    raw_metrics = data.get("metrics", [])
    episode_count = data.get("episode_count", 0)
    if not isinstance(raw_table, list) or not isinstance(raw_metrics, list):
        return None
    if not _is_count(episode_count):
        return None

    q_table: dict[str, dict[str, float]] = {}
    for entry in raw_table:
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            return None
        state, pairs = entry
        if not isinstance(state, str) or not isinstance(pairs, (list, tuple)):
            return None
        row: dict[str, float] = {}
        for pair in pairs:
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                return None
            action, value = pair
            if action not in ACTIONS or not _is_number(value):
                return None
            row[action] = float(value)
        q_table[state] = row

    metrics: list[EpisodeMetrics] = []
    for item in raw_metrics:
        parsed = _parse_metrics(item)
        if parsed is None:
            return None
        metrics.append(parsed)

    return q_table, metrics, episode_count
