"""
Entry point for python -m tsload
"""

import logging

import click
from tsload.cli import generate, load, inspect


@click.group(context_settings={'auto_envvar_prefix': 'TSLOAD'})
@click.version_option(version='1.0.0')
@click.option('--verbose', '-v', count=True, help='-v for progress logs, -vv for debug')
def cli(verbose):
    """tsload - Synthetic Time-Series Load Generator"""
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')


cli.add_command(generate)
cli.add_command(load)
cli.add_command(inspect)

if __name__ == '__main__':
    cli()
