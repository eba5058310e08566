import argparse
import logging
import pathlib
from typing import Optional

from .build import build_targets
from .configuration import load_config
from .errors import BuildError, ConfigurationError
from .generate_configuration import GenerateConfigAction
from .model import DEFAULT_TARGETS, TARGETS


class LogLevelAction(argparse.Action):
    """
    Set the log level
    """

    log_levels = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL,
    }

    def __init__(self, option_strings, dest: str, **kwargs):
        kwargs.update({
            'default': "INFO",
            'type': str,
            'choices': self.log_levels.keys(),
            'help': "The log level to use."
        })
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, _parser: argparse.ArgumentParser, namespace: argparse.Namespace, values: str, _option_string: Optional[str] = None):
        setattr(namespace, self.dest, values)


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="daqtyl", description="Generate a dactyl keyboard.")
    parser.add_argument("--generate-config", action=GenerateConfigAction)
    parser.add_argument("--config", default=None, type=pathlib.Path, help="A config file to control keyboard generation.")
    parser.add_argument("--log-level", action=LogLevelAction)
    parser.add_argument("--output-dir", default=pathlib.Path("things"), type=pathlib.Path, help="Where to write the generated files.")
    parser.add_argument("--jobs", default=None, type=int, help="Number of targets to build at once; 1 builds in process.")
    parser.add_argument(
        "targets",
        nargs="*",
        metavar="TARGET",
        help=f"Parts to generate ({', '.join(TARGETS)}, or everything).",
    )
    return parser


def main(argv=None) -> int:
    parser = make_parser()
    args = parser.parse_args(argv)
    unknown = [name for name in args.targets if name not in TARGETS and name != "everything"]
    if unknown:
        parser.error(f"unknown target(s): {', '.join(unknown)}")
    logging.basicConfig(level=args.log_level)

    try:
        config = load_config(args.config)
    except ConfigurationError as err:
        logging.error("%s", err)
        return 1

    targets = args.targets or list(DEFAULT_TARGETS)
    if "everything" in targets:
        targets = list(TARGETS)

    try:
        results = build_targets(config, targets, args.output_dir, jobs=args.jobs)
    except BuildError as err:
        for name, failure in err.failures.items():
            logging.error("%s: %s: %s", name, type(failure).__name__, failure)
        return 1

    changed = sum(result.changed for result in results)
    logging.info("Built %d target(s), %d changed", len(results), changed)
    return 0
