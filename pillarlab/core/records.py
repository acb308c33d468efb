# pillarlab/core/records.py
"""
Récords de la arena: el mejor tiempo en completar un episodio (todos los
pilares destruidos), guardado por nombre en el almacén clave/valor.
Solo se sustituye cuando un episodio completado lo mejora.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Optional

from pillarlab.helpers.console import console
from pillarlab.storage import KeyValueStore

RECORDS_KEY = "high_scores"


@dataclass
class BestRecord:
    time: float
    score: int
    episode: int


def _parse_record(raw: Any) -> Optional[BestRecord]:
    if not isinstance(raw, dict):
        return None
    time, score, episode = raw.get("time"), raw.get("score"), raw.get("episode")
    if isinstance(time, bool) or not isinstance(time, (int, float)) or not math.isfinite(time):
        return None
    for value in (score, episode):
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            return None
    return BestRecord(time=float(time), score=score, episode=episode)


class RecordBook:
    """Tabla de récords persistida bajo RECORDS_KEY, indexada por nombre."""

    def __init__(self, store: KeyValueStore, name: str):
        self.store = store
        self.name = name

    def _load_all(self) -> dict:
        try:
            data = self.store.load(RECORDS_KEY)
        except Exception as e:
            console.print(f"⚠️ [yellow]No se pudieron cargar los récords:[/yellow] {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def best(self) -> Optional[BestRecord]:
        return _parse_record(self._load_all().get(self.name))

    def submit(self, success: bool, elapsed_time: float, score: int, episode: int) -> bool:
        """Registra el episodio si es un récord. Devuelve True si lo es."""
        if not success:
            return False
        current = self.best()
        if current is not None and elapsed_time >= current.time:
            return False

        records = self._load_all()
        records[self.name] = asdict(BestRecord(
            time=float(elapsed_time), score=int(score), episode=int(episode)))
        try:
            self.store.save(RECORDS_KEY, records)
        except Exception as e:
            console.print(f"⚠️ [yellow]No se pudo guardar el récord:[/yellow] {e}")
        return True
