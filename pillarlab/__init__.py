# pillarlab/__init__.py
from gymnasium.envs.registration import register

register(
    id="pillar/PillarArena-v1",
    entry_point="pillarlab.envs.pillar_arena_v1.env:PillarArenaEnv",
    max_episode_steps=2000,
)
