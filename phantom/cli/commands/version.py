"""phantom version 命令实现"""

import click

VERSION = "0.1.0"


@click.command()
def version() -> None:
    """显示版本号"""
    click.echo(f"Phantom v{VERSION}")
