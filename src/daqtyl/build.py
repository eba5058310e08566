"""
Build and export output targets, one worker process per target.

Every target is a pure function of the (immutable) configuration, so targets run independently;
a failure in one is recorded and reported after the others have finished.
"""
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Iterable, Optional

from .configuration import KeyboardConfig
from .engines import get_engine
from .errors import BuildError, ConfigurationError
from .model import TARGETS, Keyboard


@dataclass(frozen=True)
class TargetResult:
    name: str
    path: Path
    # False when an identical file was already on disk
    changed: bool


def build_target(config: KeyboardConfig, name: str):
    logging.info("Building %s", name)
    try:
        builder = TARGETS[name]
    except KeyError:
        raise ConfigurationError(f"unknown target {name!r}") from None
    return builder(Keyboard(config, get_engine(config.ENGINE)))


def output_path(config: KeyboardConfig, name: str, output_dir: Path, file_type: str) -> Path:
    directory = Path(output_dir)
    if config.save_dir not in ('', None, '.'):
        directory = directory / config.save_dir
    return directory / f"{config.config_name}_{name}{file_type}"


def export_target(config: KeyboardConfig, name: str, output_dir: Path) -> TargetResult:
    shape = build_target(config, name)
    exporter = next(iter(get_engine(config.ENGINE).exporters()))
    path = output_path(config, name, output_dir, exporter.file_type())
    changed = exporter.export_geometry(shape, path)
    return TargetResult(name, path, changed)


def build_targets(
        config: KeyboardConfig,
        names: Iterable[str],
        output_dir: Path,
        jobs: Optional[int] = None,
) -> list:
    """
    Export every named target, returning their results in the order given.

    With `jobs == 1` the targets are built in this process; otherwise each runs in a worker of a
    process pool of at most `jobs` workers. Raises `BuildError` once all targets have been tried
    if any of them failed.
    """
    names = list(dict.fromkeys(names))
    outcomes = {}

    if jobs == 1:
        for name in names:
            try:
                outcomes[name] = export_target(config, name, output_dir)
            except Exception as err:
                outcomes[name] = err
    else:
        with ProcessPoolExecutor(max_workers=jobs) as pool:
            futures = {name: pool.submit(export_target, config, name, output_dir) for name in names}
            for name, future in futures.items():
                try:
                    outcomes[name] = future.result()
                except Exception as err:
                    outcomes[name] = err

    results = [outcome for outcome in outcomes.values() if isinstance(outcome, TargetResult)]
    failures = {name: outcome for name, outcome in outcomes.items() if isinstance(outcome, Exception)}
    for name, err in failures.items():
        logging.error("Target %s failed: %s", name, err)
    if failures:
        raise BuildError(failures, results)
    return results
