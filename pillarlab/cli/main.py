# pillarlab/cli/main.py
import random
import sys
from pathlib import Path
from typing import Optional

import gymnasium as gym
import typer
from gymnasium.error import Error as GymError
from rich.table import Table

import pillarlab  # noqa: F401  (registra los entornos "pillar/...")
from pillarlab.agents import baseline
from pillarlab.agents.q_agent import QAgent
from pillarlab.cli.run_manager import find_latest_run_dir, get_run_dir, seed_from_run_dir
from pillarlab.cli.utils import console, get_env_config, list_env_ids, normalize_env_id
from pillarlab.core.records import RecordBook
from pillarlab.storage import JsonFileStore

app = typer.Typer(
    rich_markup_mode="rich",
    help="[bold green]Pillar Lab CLI[/bold green]: agente Q-Learning que aprende a destruir pilares.",
    no_args_is_help=True
)

BASE_COMMANDS = {"list", "train", "eval", "stats", "help"}


def complete_env_id(incomplete: str):
    """
    Función de autocompletado que devuelve los IDs de entorno que coinciden.
    """
    for env_id in list_env_ids():
        if env_id.startswith(incomplete):
            yield env_id


def _check_env(env_id: str) -> str:
    env_id = normalize_env_id(env_id)
    try:
        gym.spec(env_id)
    except GymError:
        console.print(
            f"❌ [bold red]Error:[/bold red] Entorno '{env_id}' no encontrado.")
        raise typer.Exit(code=1)
    return env_id


def _resolve_run_dir(env_id: str, seed: Optional[int]) -> Optional[Path]:
    if seed is not None:
        return get_run_dir(env_id, seed)
    console.print(
        "ℹ️ No se especificó semilla. Buscando el último entrenamiento...")
    return find_latest_run_dir(env_id)


def _load_run_agent(run_dir: Optional[Path]) -> Optional[QAgent]:
    if not run_dir:
        return None
    store = JsonFileStore(run_dir)
    if not store.path_for("qagent_progress").exists():
        return None
    return QAgent(store=store)


# Comandos Principales ---


@app.command(name="list")
def list_environments():
    """Lista los entornos disponibles y su agente de referencia."""
    table = Table("Nombre", "ID (Gymnasium)", "Descripción", "Baseline Agent")
    for env_id in list_env_ids():
        config = get_env_config(env_id)
        desc = config.get("DESCRIPTION") or "N/D"
        baseline_agent = (config.get("BASELINE") or {}).get("agent", "[red]N/A[/red]")
        table.add_row(f"[cyan]{env_id.split('/')[-1]}[/cyan]",
                      f"[cyan]{env_id}[/cyan]", desc, baseline_agent)
    console.print(table)


@app.command(name="train")
def train(
    env_id: str = typer.Argument(...,
                                 help="ID del entorno a entrenar (e.g., pillar/PillarArena-v1).",
                                 autocompletion=complete_env_id),
    seed: Optional[int] = typer.Option(
        None, "--seed", "-s", help="Semilla para el entrenamiento (si no se da, se genera una)."),
    eps: Optional[int] = typer.Option(
        None, "--eps", "-e", help="Sobrescribir el número de episodios."),
):
    """Entrena un agente. Si la carpeta del 'run' ya tiene progreso, se continúa."""
    env_id = _check_env(env_id)
    config = get_env_config(env_id)
    train_config = (config.get("BASELINE") or {}).get("config", {}).copy()
    if not train_config:
        console.print(
            f"❌ Error: No hay configuración de referencia definida para {env_id}.")
        raise typer.Exit(code=1)

    if eps:
        train_config['episodes'] = eps

    # LÓGICA DE SEMILLA ALEATORIA ---
    run_seed = seed
    if run_seed is None:
        run_seed = random.randint(0, 10000)
        console.print(
            f"🌱 No se especificó semilla. Usando una aleatoria: [bold yellow]{run_seed}[/bold yellow]")

    run_dir = get_run_dir(env_id, run_seed)
    console.print(
        f"📂 Trabajando en el directorio: [bold yellow]{run_dir}[/bold yellow]")

    agent = baseline.train_agent(env_id, train_config, run_dir=run_dir, seed=run_seed)
    _print_metrics(agent)


@app.command(name="eval")
def evaluate(
    env_id: str = typer.Argument(...,
                                 help="ID del entorno a evaluar (e.g., pillar/PillarArena-v1).",
                                 autocompletion=complete_env_id),
    seed: Optional[int] = typer.Option(
        None, "--seed", "-s", help="Semilla del 'run' a evaluar (por defecto, la última)."),
    episodes: int = typer.Option(
        5, "--eps", "-e", help="Número de episodios a ejecutar."),
):
    """Evalúa un agente entrenado con la política voraz, sin modificar su progreso."""
    env_id = _check_env(env_id)
    run_dir = _resolve_run_dir(env_id, seed)
    if _load_run_agent(run_dir) is None:
        console.print(
            "❌ Error: No se encontró un entrenamiento válido. Ejecuta 'pillar train' primero.")
        raise typer.Exit(code=1)

    console.print(f"🎬 Evaluando desde [bold yellow]{run_dir}[/bold yellow]...")
    eval_seed = seed_from_run_dir(run_dir)
    if eval_seed is None:
        console.print(
            f"⚠️ No se pudo extraer la semilla del nombre de la carpeta '{run_dir.name}'.")

    train_config = (get_env_config(env_id).get("BASELINE") or {}).get("config", {})
    results = baseline.eval_agent(env_id, run_dir, episodes, seed=eval_seed, config=train_config)

    table = Table("Episodio", "Recompensa", "Pasos", "Pilares", "Tiempo (s)", "Completado")
    for r in results:
        table.add_row(str(r.episode), f"{r.reward:.2f}", str(r.steps),
                      str(r.targets_destroyed), f"{r.elapsed_time:.1f}",
                      "[green]sí[/green]" if r.success else "[red]no[/red]")
    console.print(table)


@app.command(name="stats")
def stats(
    env_id: str = typer.Argument(...,
                                 help="ID del entorno (e.g., pillar/PillarArena-v1).",
                                 autocompletion=complete_env_id),
    seed: Optional[int] = typer.Option(
        None, "--seed", "-s", help="Semilla del 'run' (por defecto, la última)."),
):
    """Muestra las métricas de rendimiento guardadas de un 'run'."""
    env_id = _check_env(env_id)
    agent = _load_run_agent(_resolve_run_dir(env_id, seed))
    if agent is None:
        console.print(
            "❌ Error: No se encontró un entrenamiento válido. Ejecuta 'pillar train' primero.")
        raise typer.Exit(code=1)
    _print_metrics(agent)

    best = RecordBook(agent.store, baseline.record_name(env_id)).best()
    if best is None:
        console.print("🏆 Mejor tiempo: sin récord todavía.")
    else:
        console.print(
            f"🏆 Mejor tiempo: [bold]{best.time:.2f}s[/bold] "
            f"(puntuación {best.score}, episodio {best.episode})")


def _print_metrics(agent: QAgent) -> None:
    metrics = agent.get_performance_metrics()
    if metrics is None:
        console.print("ℹ️ Todavía no hay episodios completados.")
        return
    table = Table("Métrica", "Valor", title="Rendimiento de la IA")
    table.add_row("Episodios", str(metrics.episode_count))
    table.add_row("Recompensa media", f"{metrics.average_reward:.2f}")
    table.add_row("Pasos medios", f"{metrics.average_steps:.0f}")
    table.add_row("Tiempo medio", f"{metrics.average_time:.1f}s")
    table.add_row("Pilares medios", f"{metrics.average_targets:.1f}")
    table.add_row("Éxito", f"{metrics.success_rate * 100:.0f}%")
    table.add_row("Exploración", f"{metrics.epsilon * 100:.1f}%")
    table.add_row("Estados aprendidos", str(len(agent.q_table)))
    console.print(table)


@app.command(name="help")
def help_env(
    env_id: str = typer.Argument(...,
                                 help="ID del entorno a inspeccionar (e.g., pillar/PillarArena-v1).",
                                 autocompletion=complete_env_id),
):
    """Muestra la ficha técnica del entorno."""
    env_id = _check_env(env_id)
    env = gym.make(env_id)
    try:
        console.print(
            f"\n[bold underline]Ficha Técnica de {env_id}[/bold underline]\n")
        description = get_env_config(env_id).get("DESCRIPTION")
        if description:
            console.print(f"{description}\n")
        console.print(
            f"[bold cyan]Observation Space:[/bold cyan]\n{env.observation_space}\n")
        console.print(
            f"[bold cyan]Action Space:[/bold cyan]\n{env.action_space}\n")
    finally:
        env.close()


def rewrite_shorthand(argv: list[str]) -> list[str]:
    """
    Soporte sintaxis abreviada: `pillar <env-id> <comando> [...args]`
    se reescribe a la forma clásica `pillar <comando> pillar/<env-id> [...args]`,
    y `pillar <env-id>` a `pillar help pillar/<env-id>`.
    """
    if len(argv) < 2 or argv[1] in BASE_COMMANDS or argv[1].startswith("-"):
        return argv
    env_id = normalize_env_id(argv[1])
    if env_id not in list_env_ids():
        return argv
    if len(argv) == 2:
        return [argv[0], "help", env_id]
    if argv[2] in BASE_COMMANDS:
        return [argv[0], argv[2], env_id] + argv[3:]
    return argv


# Función principal que se ejecuta cuando se llama a 'pillar'
def run_app():
    sys.argv = rewrite_shorthand(list(sys.argv))
    app()


if __name__ == "__main__":
    run_app()
