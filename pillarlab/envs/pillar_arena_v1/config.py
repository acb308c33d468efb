# pillarlab/envs/pillar_arena_v1/config.py

DESCRIPTION = "Destruye los ocho pilares de la arena lo más rápido posible."

UNIT = "ql"
ALGORITHM = "ql"

# Configuración del agente de referencia para 'pillar train'
BASELINE = {
    "agent": "q_agent",  # Módulo en pillarlab/agents/
    "config": {
        "episodes": 200,
        "alpha": 0.1,
        "gamma": 0.9,
        "epsilon": 0.1,
        "min_epsilon": 0.01,
        "decay_horizon": 1000,
        "save_every": 100,
    }
}
