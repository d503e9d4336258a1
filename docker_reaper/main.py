import logging
from pathlib import Path
from typing import Optional

import typer

from . import config
from .errors import ReaperError
from .lock import InstanceLock
from .log import setup_logging
from .models import ALL_MODES, CONTAINER_MODES, Mode
from .reaper import Reaper
from .runtime import DockerRuntime

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False)


def requested_modes(all_modes: bool, containers: bool, dangling_images: bool, all_images: bool):
    """Maps the mode flags to cleanup modes in the fixed run order."""
    if all_modes:
        return ALL_MODES
    modes = set()
    if containers:
        modes.update(CONTAINER_MODES)
    if dangling_images:
        modes.add(Mode.DANGLING_IMAGES)
    if all_images:
        modes.add(Mode.UNUSED_IMAGES)
    return tuple(mode for mode in ALL_MODES if mode in modes)


def run(options: config.ReaperOptions, modes) -> None:
    """Holds the host lock for the whole run and executes each mode in turn."""
    with InstanceLock(options.lock_file):
        runtime = DockerRuntime.from_env()
        Reaper(runtime, options).run_all(modes)


@app.command()
def main(
    ctx: typer.Context,
    all_modes: bool = typer.Option(False, "--all", help="Remove exited, dead and failed containers, dangling and unused images."),
    containers: bool = typer.Option(False, "--containers", "-c", help="Remove exited, dead and failed containers."),
    dangling_images: bool = typer.Option(False, "--dangling-images", "-d", help="Remove untagged images."),
    all_images: bool = typer.Option(False, "--all-images", help="Remove every image no container uses."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview what would be removed without removing anything."),
    settle_delay: Optional[float] = typer.Option(None, "--settle-delay", min=0, help="Seconds to wait before removing unused images."),
    config_file: Path = typer.Option(config.CONFIG_FILE, "--config", help="JSON configuration file."),
    lock_file: Optional[Path] = typer.Option(None, "--lock-file", help="Lock file that keeps runs from overlapping."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR."),
):
    """Reclaim disk space by removing stale Docker containers and unused images."""
    modes = requested_modes(all_modes, containers, dangling_images, all_images)
    if not modes:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)

    # console logging first, so config file warnings come out formatted
    setup_logging(log_level or config.DEFAULT_CONFIG["log_level"])
    try:
        options = config.ReaperOptions.from_config(
            config.load_config(config_file),
            settle_delay_seconds=settle_delay,
            lock_file=lock_file,
            log_level=log_level,
            dry_run_mode=True if dry_run else None,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    setup_logging(options.log_level, options.log_file)

    try:
        run(options, modes)
    except ReaperError as e:
        logger.critical(str(e))
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
