# noderpc/cli/__main__.py

"""
Node RPC CLI

Usage: python -m noderpc.cli [command] [options]
"""

import click

from ..core.logging import NodeRpcLogger
from .context import CLIContext
from .commands.call import call
from .commands.methods import methods
from .commands.stream import stream


@click.group()
@click.option('--transport', type=click.Choice(['ws', 'http']), help='Transport to the node')
@click.option('--uri', help='HTTP endpoint of the node')
@click.option('--websocket', help='WebSocket endpoint of the node')
@click.option('--timeout', type=float, help='Request timeout in seconds')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='YAML client configuration')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, transport, uri, websocket, timeout, config_path, verbose):
    """Node RPC CLI - call node methods and follow the chain"""
    ctx.ensure_object(dict)

    NodeRpcLogger.configure(
        log_level="DEBUG" if verbose else "WARNING",
        console_enabled=True,
        file_enabled=False,
        structured_format=verbose,
    )

    if 'cli_context' not in ctx.obj:
        ctx.obj['cli_context'] = CLIContext(
            overrides={
                'transport': transport,
                'uri': uri,
                'websocket': websocket,
                'timeout': timeout,
            },
            config_path=config_path,
        )


cli.add_command(call)
cli.add_command(methods)
cli.add_command(stream)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
