# pillarlab/cli/utils.py
import importlib

import gymnasium as gym

from pillarlab.helpers.console import console  # noqa: F401  (reexportado para la CLI)

NAMESPACE = "pillar/"


def list_env_ids() -> list[str]:
    return sorted(env_id for env_id in gym.envs.registry.keys()
                  if env_id.startswith(NAMESPACE))


def normalize_env_id(env_id: str) -> str:
    # Aceptar tanto "PillarArena-v1" como "pillar/PillarArena-v1"
    return env_id if env_id.startswith(NAMESPACE) else f"{NAMESPACE}{env_id}"


def _read_config(config_module) -> dict:
    return {
        "DESCRIPTION": getattr(config_module, 'DESCRIPTION', None),
        "BASELINE": getattr(config_module, 'BASELINE', None),
        "UNIT": getattr(config_module, 'UNIT', None),
        "ALGORITHM": getattr(config_module, 'ALGORITHM', None),
    }


def get_env_config(env_id: str) -> dict:
    """
    Intenta cargar el módulo de configuración (config.py) para un entorno específico.
    """
    try:
        # Obtenemos la especificación del entorno registrado
        spec = gym.spec(env_id)
        # e.g., "pillarlab.envs.pillar_arena_v1.env:PillarArenaEnv"
        module_path = spec.entry_point.split(':')[0]

        # Reemplazamos el último segmento (e.g., 'env') por 'config'
        path_parts = module_path.split('.')
        if len(path_parts) <= 1:
            return {}
        config_module = importlib.import_module(
            ".".join(path_parts[:-1] + ["config"]))
        return _read_config(config_module)

    except (ImportError, AttributeError, gym.error.Error):
        return {}
