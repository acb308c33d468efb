# pillarlab/cli/run_manager.py
from pathlib import Path
from typing import Optional

RUNS_ROOT = Path("runs")


def env_dir_name(env_id: str) -> str:
    # "pillar/PillarArena-v1" -> "PillarArena-v1"
    return env_id.split('/')[-1]


def get_run_dir(env_id: str, seed: int, root: Optional[Path] = None) -> Path:
    """Devuelve (y crea) la carpeta de un 'run': runs/<entorno>/seed-<semilla>."""
    run_dir = (root or RUNS_ROOT) / env_dir_name(env_id) / f"seed-{seed}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def find_latest_run_dir(env_id: str, root: Optional[Path] = None) -> Optional[Path]:
    """La carpeta de 'run' modificada más recientemente, o None si no hay ninguna."""
    env_root = (root or RUNS_ROOT) / env_dir_name(env_id)
    if not env_root.exists():
        return None
    runs = [p for p in env_root.iterdir() if p.is_dir() and p.name.startswith("seed-")]
    if not runs:
        return None
    return max(runs, key=lambda p: p.stat().st_mtime)


def seed_from_run_dir(run_dir: Path) -> Optional[int]:
    try:
        return int(run_dir.name.split('-')[1])
    except (IndexError, ValueError):
        return None
