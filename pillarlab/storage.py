# pillarlab/storage.py
"""Almacenes clave/valor para persistir el progreso del agente entre sesiones.

El contrato es mínimo: `save(key, value)` y `load(key)`. El valor debe ser
serializable a JSON. Los fallos se registran por consola y nunca se propagan:
un `load` fallido devuelve None (arranque en frío) y un `save` fallido deja
la tabla en memoria como fuente de verdad.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Protocol

from pillarlab.helpers.console import console


class KeyValueStore(Protocol):
    def save(self, key: str, value: Any) -> None: ...

    def load(self, key: str) -> Optional[Any]: ...


class MemoryStore:
    """Almacén en memoria. Útil para pruebas y evaluaciones sin efectos."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def save(self, key: str, value: Any) -> None:
        try:
            # Serializamos para detectar valores no-JSON igual que en disco
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            console.print(
                f"⚠️ [yellow]No se pudo guardar '{key}':[/yellow] {e}")

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)


class JsonFileStore:
    """
    Guarda cada clave como `<directorio>/<clave>.json`.

    La escritura pasa por un fichero temporal y un `replace` para no dejar
    un JSON truncado si el proceso muere a mitad de escritura.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def save(self, key: str, value: Any) -> None:
        target = self.path_for(key)
        tmp = target.with_suffix(".json.tmp")
        try:
            payload = json.dumps(value)
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            tmp.replace(target)
        except (OSError, TypeError, ValueError) as e:
            console.print(
                f"⚠️ [yellow]No se pudo guardar el progreso en {target}:[/yellow] {e}")

    def load(self, key: str) -> Optional[Any]:
        target = self.path_for(key)
        if not target.exists():
            return None
        try:
            return json.loads(target.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            console.print(
                f"⚠️ [yellow]No se pudo cargar el progreso de {target}:[/yellow] {e}")
            return None

