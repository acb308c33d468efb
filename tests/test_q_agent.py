import numpy as np
import pytest

from pillarlab.agents.q_agent import ACTIONS, HISTORY_SIZE, PROGRESS_KEY, QAgent
from pillarlab.agents.state import encode_state

from conftest import FixedRng

TARGETS = [(4.0, 0.75, 0.0)]
ORIGIN = (0.0, 0.0, 0.0)


def test_unseen_values_are_zero_and_not_materialized(agent):
    assert agent.get_q_value("1,1:none", "up") == 0.0
    assert agent.q_table == {}


def test_choose_action_does_not_touch_table(agent):
    agent.choose_action(ORIGIN, TARGETS)
    assert agent.q_table == {}


def test_greedy_picks_best_action(agent):
    state = encode_state(ORIGIN, TARGETS)
    agent.set_q_value(state, "left", 0.5)
    agent.set_q_value(state, "right", 2.0)
    assert agent.choose_action(ORIGIN, TARGETS) == "right"


def test_greedy_ties_follow_action_order(agent):
    state = encode_state(ORIGIN, TARGETS)
    assert agent.choose_action(ORIGIN, TARGETS) == "up"
    agent.set_q_value(state, "up", -1.0)
    agent.set_q_value(state, "down", -1.0)
    assert agent.choose_action(ORIGIN, TARGETS) == "left"


def test_none_chosen_when_uniquely_best(agent):
    state = encode_state(ORIGIN, TARGETS)
    for action in ACTIONS[:-1]:
        agent.set_q_value(state, action, -1.0)
    assert agent.choose_action(ORIGIN, TARGETS) == "none"


def test_exploration_returns_random_action(store):
    agent = QAgent(store=store, rng=FixedRng(value=0.0, index=3))
    assert agent.choose_action(ORIGIN, TARGETS) == "right"


def test_epsilon_decays_with_episode_count(store):
    agent = QAgent(store=store, epsilon=0.1, min_epsilon=0.01, decay_horizon=1000)
    assert agent.effective_epsilon() == pytest.approx(0.1)
    agent.episode_count = 500
    assert agent.effective_epsilon() == pytest.approx(0.05)


def test_exploration_floor_is_never_zero(store):
    agent = QAgent(store=store, epsilon=0.1, min_epsilon=0.01, decay_horizon=1000)
    for count in (1000, 5000, 10 ** 6):
        agent.episode_count = count
        assert agent.effective_epsilon() >= 0.01
        assert agent.effective_epsilon() > 0


def test_invalid_decay_horizon():
    with pytest.raises(ValueError):
        QAgent(decay_horizon=0)


def test_learn_applies_td_update(agent):
    agent.learn(ORIGIN, "right", 1.0, (0.5, 0.0, 0.0), TARGETS)
    state = encode_state(ORIGIN, TARGETS)
    assert agent.get_q_value(state, "right") == pytest.approx(0.1)

    next_state = encode_state((0.5, 0.0, 0.0), TARGETS)
    agent.set_q_value(next_state, "down", 2.0)
    agent.learn(ORIGIN, "right", 1.0, (0.5, 0.0, 0.0), TARGETS)
    expected = 0.1 + 0.1 * (1.0 + 0.9 * 2.0 - 0.1)
    assert agent.get_q_value(state, "right") == pytest.approx(expected)


def test_learn_converges_on_single_state(agent):
    # Un único estado y una única acción con recompensa constante
    r = 1.0
    for _ in range(2000):
        agent.learn(ORIGIN, "none", r, ORIGIN, [])
    value = agent.get_q_value(encode_state(ORIGIN, []), "none")
    assert value == pytest.approx(r / (1 - agent.discount_factor), rel=1e-3)


def test_learn_rejects_unknown_action(agent):
    with pytest.raises(ValueError):
        agent.learn(ORIGIN, "jump", 1.0, ORIGIN, TARGETS)


def test_learn_accumulates_episode_metrics(agent):
    agent.learn(ORIGIN, "up", 1.5, (0.0, 0.0, -0.5), TARGETS)
    agent.learn(ORIGIN, "up", -0.5, (0.0, 0.0, -0.5), TARGETS)
    assert agent.current_episode.episode_reward == pytest.approx(1.0)
    assert agent.current_episode.episode_steps == 2


def test_learn_flushes_periodically(store):
    agent = QAgent(store=store, rng=FixedRng(), save_every=3)
    agent.learn(ORIGIN, "up", 1.0, (0.0, 0.0, -0.5), TARGETS)
    agent.learn(ORIGIN, "up", 1.0, (0.0, 0.0, -0.5), TARGETS)
    assert store.load(PROGRESS_KEY) is None
    agent.learn(ORIGIN, "up", 1.0, (0.0, 0.0, -0.5), TARGETS)
    assert store.load(PROGRESS_KEY) is not None


def test_complete_episode_bookkeeping(agent, store):
    agent.learn(ORIGIN, "up", 2.0, (0.0, 0.0, -0.5), TARGETS)
    agent.record_target_reached()
    finished = agent.complete_episode(success=True, elapsed_time=12.5)

    assert finished.episode_reward == pytest.approx(2.0)
    assert finished.targets_reached == 1
    assert finished.completion_time == 12.5
    assert finished.success is True
    assert agent.episode_count == 1
    assert len(agent.metrics) == 1
    assert agent.current_episode.episode_steps == 0
    assert store.load(PROGRESS_KEY)["episode_count"] == 1


def test_history_is_bounded_and_evicts_oldest(agent):
    for i in range(HISTORY_SIZE):
        agent.current_episode.episode_reward = float(i)
        agent.complete_episode(success=False, elapsed_time=i)
    assert len(agent.metrics) == HISTORY_SIZE
    assert agent.metrics[0].episode_reward == 0.0

    agent.current_episode.episode_reward = 999.0
    agent.complete_episode(success=False, elapsed_time=0)
    assert len(agent.metrics) == HISTORY_SIZE
    assert agent.metrics[0].episode_reward == 1.0
    assert agent.metrics[-1].episode_reward == 999.0
    assert agent.episode_count == HISTORY_SIZE + 1


def test_performance_metrics_none_before_first_episode(agent):
    assert agent.get_performance_metrics() is None


def test_performance_metrics_average_last_ten(agent):
    for i in range(15):
        agent.current_episode.episode_reward = float(i)
        agent.current_episode.episode_steps = 10 * i
        agent.current_episode.targets_reached = 8 if i % 2 else 0
        agent.complete_episode(success=bool(i % 2), elapsed_time=float(i))

    metrics = agent.get_performance_metrics()
    window = np.arange(5, 15)
    assert metrics.episode_count == 15
    assert metrics.average_reward == pytest.approx(window.mean())
    assert metrics.average_steps == pytest.approx((10 * window).mean())
    assert metrics.average_time == pytest.approx(window.mean())
    assert metrics.success_rate == pytest.approx(0.5)
    assert metrics.average_targets == pytest.approx(4.0)
    assert metrics.epsilon == pytest.approx(agent.effective_epsilon())

