"""
Command Line Interface for the libdragon toolchain.
"""
import asyncio
import logging

import click

from ..errors import DragonError
from ..MANAGERS.toolchain_manager import ToolchainManager
from ..MODELS.options import Options
from ..UTILS.log_config import configure_logging
from .actions import ACTIONS

logger = logging.getLogger(__name__)


def print_actions(ctx, param, value):
    """
    Lists the available actions and exits.
    """
    if not value or ctx.resilient_parsing:
        return
    click.echo("Available actions:")
    for name in ACTIONS:
        click.echo(name)
    ctx.exit(0)


@click.command(context_settings={"ignore_unknown_options": True}, add_help_option=False)
@click.option('--mount-path', default=None, help='Host directory bound into the container')
@click.option('--byte-swap', is_flag=True, help='Produce byte-swapped ROMs')
@click.option('--help', is_flag=True, expose_value=False, is_eager=True,
              callback=print_actions, help='List available actions')
@click.argument('argv', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def cli(ctx, mount_path, byte_swap, argv):
    """
    Manage the libdragon toolchain container and build inside it.

    The first argument naming an action selects it and everything after it is
    passed on to the action. Unknown actions are ignored.
    """
    configure_logging()
    ctx.ensure_object(dict)

    for index, verb in enumerate(argv):
        if verb in ACTIONS:
            break
    else:
        logger.debug("No action given in %s", list(argv))
        return

    options = Options.from_environment(mount_path=mount_path, byte_swap=byte_swap)
    manager = ToolchainManager(options, runner=ctx.obj.get('runner'))

    try:
        asyncio.run(ACTIONS[verb](manager, argv[index + 1:]))
    except DragonError as e:
        logger.debug("%s failed: %s", verb, e)
        ctx.exit(1)


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
