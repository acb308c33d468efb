import pytest
from typer.testing import CliRunner

from pillarlab.cli.main import app, rewrite_shorthand
from pillarlab.cli.run_manager import find_latest_run_dir, get_run_dir, seed_from_run_dir
from pillarlab.cli.utils import get_env_config

ENV_ID = "pillar/PillarArena-v1"

runner = CliRunner()


@pytest.fixture(autouse=True)
def in_tmp_dir(tmp_path, monkeypatch):
    # Los 'runs' se crean relativos al directorio de trabajo
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_env_config_is_discovered():
    config = get_env_config(ENV_ID)
    assert config["UNIT"] == "ql"
    assert config["BASELINE"]["config"]["alpha"] == 0.1


def test_env_config_unknown_env():
    assert get_env_config("pillar/Nope-v1") == {}


def test_list_shows_environment():
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "PillarArena-v1" in result.output


def test_train_then_stats_and_eval(in_tmp_dir):
    result = runner.invoke(app, ["train", ENV_ID, "--seed", "3", "--eps", "2"])
    assert result.exit_code == 0, result.output
    assert (in_tmp_dir / "runs" / "PillarArena-v1" / "seed-3" / "qagent_progress.json").exists()

    result = runner.invoke(app, ["stats", ENV_ID, "--seed", "3"])
    assert result.exit_code == 0, result.output
    assert "Episodios" in result.output
    assert "Mejor tiempo" in result.output

    result = runner.invoke(app, ["eval", ENV_ID, "--eps", "1"])
    assert result.exit_code == 0, result.output
    assert "seed-3" in result.output


def test_train_resumes_existing_run():
    runner.invoke(app, ["train", ENV_ID, "--seed", "4", "--eps", "1"])
    result = runner.invoke(app, ["train", ENV_ID, "--seed", "4", "--eps", "1"])
    assert result.exit_code == 0, result.output
    assert "Reanudando" in result.output


def test_eval_without_training_fails():
    result = runner.invoke(app, ["eval", ENV_ID])
    assert result.exit_code == 1


def test_unknown_environment_fails():
    result = runner.invoke(app, ["stats", "pillar/Nope-v1"])
    assert result.exit_code == 1
    assert "no encontrado" in result.output


def test_help_shows_spaces():
    result = runner.invoke(app, ["help", "PillarArena-v1"])
    assert result.exit_code == 0, result.output
    assert "Discrete(5)" in result.output


def test_rewrite_shorthand():
    assert rewrite_shorthand(["pillar", "PillarArena-v1", "train", "-s", "1"]) == \
        ["pillar", "train", ENV_ID, "-s", "1"]
    assert rewrite_shorthand(["pillar", "PillarArena-v1"]) == ["pillar", "help", ENV_ID]
    assert rewrite_shorthand(["pillar", "list"]) == ["pillar", "list"]
    assert rewrite_shorthand(["pillar", "Nope-v1", "train"]) == ["pillar", "Nope-v1", "train"]


def test_run_dirs(tmp_path):
    assert find_latest_run_dir(ENV_ID, root=tmp_path) is None
    run_dir = get_run_dir(ENV_ID, 12, root=tmp_path)
    assert run_dir == tmp_path / "PillarArena-v1" / "seed-12"
    assert find_latest_run_dir(ENV_ID, root=tmp_path) == run_dir
    assert seed_from_run_dir(run_dir) == 12
    assert seed_from_run_dir(tmp_path / "otro") is None
