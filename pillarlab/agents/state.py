from __future__ import annotations

import math
from typing import Optional, Sequence

Position = Sequence[float]


def planar_distance(a: Position, b: Position) -> float:
    """Distancia euclídea en el plano XZ (la Y se ignora)."""
    return math.hypot(a[0] - b[0], a[2] - b[2])


def nearest_target(position: Position, targets: Sequence[Position]) -> tuple[Optional[Position], float]:
    """
    Devuelve el objetivo más cercano y su distancia. Con la comparación
    estricta, en caso de empate gana el primero de la lista.
    Sin objetivos devuelve (None, inf).
    """
    best = None
    best_dist = math.inf
    for target in targets:
        dist = planar_distance(position, target)
        if dist < best_dist:
            best_dist = dist
            best = target
    return best, best_dist


def _snap(value: float) -> float:
    # Redondeo al 0.5 más cercano
    return math.floor(value * 2 + 0.5) / 2


def _fmt(value: float) -> str:
    # Enteros sin decimales ("4", no "4.0"); el resto con repr exacto.
    # El "+ 0.0" normaliza -0.0 para que no genere claves distintas.
    value = float(value) + 0.0
    if value.is_integer():
        return str(int(value))
    return repr(value)


def encode_state(position: Position, targets: Sequence[Position]) -> str:
    """Adaptador canónico: (x, z) redondeados + objetivo más cercano -> clave de la tabla Q."""
    x = _snap(position[0])
    z = _snap(position[2])
    target, _ = nearest_target(position, targets)
    if target is None:
        return f"{_fmt(x)},{_fmt(z)}:none"
    return f"{_fmt(x)},{_fmt(z)}:{_fmt(target[0])},{_fmt(target[2])}"
