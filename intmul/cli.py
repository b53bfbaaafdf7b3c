#!/usr/bin/env python3
"""
Command-line entry point.

Reads two equal-length hex numbers, one per line, from stdin and writes
their product to stdout. The same entry point runs every process unit of
the recursion: a unit started by a parent receives its position through
the hidden ``--node`` option and skips top-level padding.
"""

import logging
from pathlib import Path

import click
import yaml

from intmul.config import Config, defaults
from intmul.core import make_spawner, run_unit, EXIT_FAILURE
from intmul.core.unit import report_failure
from intmul.exceptions import IntmulError, InvalidUsage
from intmul.infrastructure.logging import setup_logging

logger = logging.getLogger(__name__)

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--config', 'config_file', type=click.Path(dir_okay=False, path_type=Path),
              help='YAML configuration file')
@click.option('--backend', type=click.Choice(defaults.BACKENDS),
              help='Run worker units as processes or threads')
@click.option('--log-level', type=click.Choice(LOG_LEVELS, case_sensitive=False),
              help='Log level for stderr')
@click.option('--node', 'node_id', hidden=True,
              help='Recursion node of a spawned unit')
@click.argument('extra', nargs=-1)
@click.pass_context
def cli(ctx, config_file, backend, log_level, node_id, extra):
    """Multiply two hexadecimal integers read from stdin."""
    errstream = click.get_text_stream('stderr')

    try:
        if extra:
            raise InvalidUsage("invalid number of arguments, correct usage: intmul")
        try:
            config = Config(config_file)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise InvalidUsage(f"invalid configuration: {e}", e) from e
    except IntmulError as e:
        report_failure(errstream, defaults.PROGRAM_NAME, e)
        ctx.exit(EXIT_FAILURE)

    if backend:
        config.set('workers.backend', backend)
    if log_level:
        config.set('logging.level', log_level.upper())

    setup_logging(config)
    logger.debug(f"Starting unit {node_id or 'root'} with {config.backend} backend")

    spawner = make_spawner(config, errstream=errstream)
    status = run_unit(
        click.get_binary_stream('stdin'),
        click.get_binary_stream('stdout'),
        errstream,
        spawner,
        node_id=node_id,
        pad=node_id is None
    )
    ctx.exit(status)


def main():
    cli(prog_name=defaults.PROGRAM_NAME)


if __name__ == '__main__':
    main()
