#!/usr/bin/env python3

import click

from regsweep.commands.sweep import sweep_handler
from regsweep.commands.config import config_cmd


@click.group()
@click.version_option(package_name='regsweep')
def cli():
    """regsweep - Garbage collector for registry image stores.

    Finds tags that have not been updated within a retention window and
    removes the images that only those stale tags still reference.
    """
    pass


cli.add_command(sweep_handler, name='sweep')
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
