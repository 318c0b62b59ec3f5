"""WebApp CLI — run, install, test and build a project.

Usage:
    webapp run [--path ./lib/app.py]
    webapp get
    webapp test [--reporter compact]
    webapp build [--app-path ./lib/app.py] [--output ./webapp_build] [--type zip]
"""

import asyncio
import os
import shutil
import subprocess
import sys
import tempfile
import time
from datetime import datetime, timezone
from typing import Optional

import structlog
import typer

from webapp import __version__
from webapp.cli.console import Colors, Console, console
from webapp.cli.supervisor import (
    DevRunner,
    SupervisorError,
    SupervisorExit,
    resolve_entry_point,
    stdin_commands,
)

logger = structlog.get_logger()

app = typer.Typer(help="WebApp CLI - run, test and build WebApp projects")

DEFAULT_OUTPUT = "./webapp_build"

REPORTERS = {
    "compact": ["-q"],
    "expanded": ["-v"],
}


async def _supervise(path: str, out: Console) -> None:
    runner = DevRunner(path, console=out)
    await runner.start()
    out.write(runner.banner(), Colors.SUCCESS)
    await runner.serve(stdin_commands())
    await runner.wait()


@app.command()
def run(
    path: str = typer.Option("", "--path", help="Path of the app entry point"),
):
    """Run the project and reload it on demand"""
    entry = resolve_entry_point(path, console)
    try:
        asyncio.run(_supervise(entry, console))
    except SupervisorError as e:
        console.write(str(e), Colors.ERROR)
        raise typer.Exit(1)
    except SupervisorExit as e:
        raise typer.Exit(e.code)


@app.command()
def get():
    """Install the project and its dependencies"""
    args = [sys.executable, "-m", "pip", "install", "-e", "."]
    logger.info("dependencies_install_started", args=args)
    completed = subprocess.run(args)
    raise typer.Exit(completed.returncode)


@app.command()
def test(
    reporter: str = typer.Option("", "--reporter", help="Output style: compact or expanded"),
):
    """Run the project's test suite in test mode"""
    if reporter and reporter not in REPORTERS:
        raise typer.BadParameter(
            f"Unknown reporter '{reporter}'. Use one of: {', '.join(sorted(REPORTERS))}",
            param_hint="--reporter",
        )

    args = [sys.executable, "-m", "pytest", *REPORTERS.get(reporter, [])]
    env = {**os.environ, "WEBAPP_IS_TEST": "true"}
    logger.info("test_run_started", args=args)
    completed = subprocess.run(args, env=env)
    raise typer.Exit(completed.returncode)


def _copy_tree(label: str, source: str, target: str) -> None:
    if not source or not os.path.isdir(source):
        return
    with console.console.status(f"[bold blue]{label}..."):
        shutil.copytree(source, target, dirs_exist_ok=True)
    console.write(f"{label}: done", Colors.SUCCESS)


def _write_env(env_path: str, target: str) -> None:
    if env_path and os.path.isfile(env_path):
        shutil.copyfile(env_path, target)
        return
    build_date = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    with open(target, "w", encoding="utf-8") as fh:
        fh.write(f"WEBAPP_VERSION='{__version__}'\nWEBAPP_BUILD_DATE='{build_date}'")


def _zip_output(output: str) -> str:
    with console.console.status("[bold blue]Compress output..."):
        base = os.path.join(tempfile.gettempdir(), f"build_{int(time.time() * 1000)}")
        archive = shutil.make_archive(base, "zip", root_dir=output)
        for entry in os.listdir(output):
            entry_path = os.path.join(output, entry)
            if os.path.isdir(entry_path):
                shutil.rmtree(entry_path)
            else:
                os.remove(entry_path)
        target = os.path.join(output, "webapp_build.zip")
        shutil.move(archive, target)
    return target


@app.command()
def build(
    app_path: str = typer.Option("./lib/app.py", "--app-path", help="Path of the app entry point"),
    output: str = typer.Option(DEFAULT_OUTPUT, "--output", help="Output directory"),
    public_path: str = typer.Option("./public", "--public-path", help="Static files directory"),
    lang_path: str = typer.Option("./lib/languages", "--lang-path", help="Language files directory"),
    widget_path: str = typer.Option("./lib/widgets", "--widget-path", help="Widgets directory"),
    env_path: str = typer.Option("./.env", "--env-path", help="Environment file to ship"),
    output_type: str = typer.Option("dir", "--type", help="Output type: dir or zip"),
):
    """Assemble a deployable copy of the project"""
    if not app_path or not os.path.isfile(app_path):
        console.write(
            "The path of the app entry point is required, for example '--app-path ./lib/app.py'",
            Colors.ERROR,
        )
        raise typer.Exit(1)

    if os.path.isdir(output):
        if os.path.normpath(output) != os.path.normpath(DEFAULT_OUTPUT):
            console.write(
                f"The output path '{output}' already exists, for example '--output ./webapp_build'",
                Colors.ERROR,
            )
            raise typer.Exit(1)
        shutil.rmtree(output)

    lib_dir = os.path.join(output, "lib")
    os.makedirs(lib_dir, exist_ok=True)

    _copy_tree("Copy public files", public_path, os.path.join(output, "public"))
    _copy_tree("Copy language files", lang_path, os.path.join(lib_dir, "languages"))
    _copy_tree("Copy widgets", widget_path, os.path.join(lib_dir, "widgets"))
    _write_env(env_path, os.path.join(lib_dir, ".env"))
    shutil.copyfile(app_path, os.path.join(lib_dir, os.path.basename(app_path)))

    archive: Optional[str] = None
    if output_type == "zip":
        archive = _zip_output(output)

    logger.info("build_finished", output=output, archive=archive)
    console.write("Finish build OK!", Colors.SUCCESS)


if __name__ == "__main__":
    app()
