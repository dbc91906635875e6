# noderpc/cli/commands/call.py

"""
Single RPC call from the command line.
"""

import asyncio

import click
import msgspec

from ...types import NodeRpcError


def parse_argument(value: str):
    """JSON when it parses (numbers, lists, objects, booleans), else the raw string."""
    try:
        return msgspec.json.decode(value)
    except msgspec.DecodeError:
        return value


@click.command('call')
@click.argument('method')
@click.argument('args', nargs=-1)
@click.option('--pretty', is_flag=True, help='Indent the JSON output')
@click.pass_context
def call(ctx, method, args, pretty):
    """Call METHOD with positional ARGS and print the result as JSON

    Examples:
        noderpc call get_dynamic_global_properties

        noderpc call get_block 1000

        noderpc call get_accounts '["alice", "bob"]'
    """
    client = ctx.obj['cli_context'].client

    if method not in client.methods:
        raise click.UsageError(f"Unknown method {method!r}, see `noderpc methods`")

    generated = client.methods[method]
    if len(args) > len(generated.params):
        raise click.UsageError(
            f"{method} takes {len(generated.params)} arguments ({', '.join(generated.params)})"
        )

    async def run():
        try:
            return await generated.call_async(*[parse_argument(arg) for arg in args])
        finally:
            await client.close()

    try:
        result = asyncio.run(run())
    except NodeRpcError as e:
        raise click.ClickException(str(e)) from e

    encoded = msgspec.json.encode(result)
    if pretty:
        encoded = msgspec.json.format(encoded, indent=2)
    click.echo(encoded.decode())
