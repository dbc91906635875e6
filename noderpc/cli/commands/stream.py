# noderpc/cli/commands/stream.py

"""
Follow the chain from the command line, one JSON document per line.
"""

import asyncio

import click
import msgspec

STREAM_KINDS = {
    'numbers': 'stream_block_number',
    'blocks': 'stream_block',
    'transactions': 'stream_transactions',
    'operations': 'stream_operations',
}


@click.command('stream')
@click.argument('kind', type=click.Choice(list(STREAM_KINDS)))
@click.option('--mode', type=click.Choice(['head', 'irreversible']), default='head',
              help='Follow the head block or the last irreversible block')
@click.option('--interval', type=int, default=200, help='Polling interval in milliseconds')
@click.option('--limit', type=int, default=None, help='Stop after this many events')
@click.pass_context
def stream(ctx, kind, mode, interval, limit):
    """Print block numbers, blocks, transactions or operations as they arrive

    Examples:
        noderpc stream numbers --limit 10

        noderpc stream operations --mode irreversible
    """
    client = ctx.obj['cli_context'].client
    start_stream = getattr(client, STREAM_KINDS[kind])

    async def run():
        done = asyncio.Event()
        state = {'count': 0, 'error': None, 'handle': None}

        def on_event(err, value):
            if err is not None:
                state['error'] = err
                done.set()
                return
            click.echo(msgspec.json.encode(value).decode())
            state['count'] += 1
            if limit and state['count'] >= limit:
                state['handle']()
                done.set()

        state['handle'] = start_stream(mode, on_event, interval)
        try:
            await done.wait()
        finally:
            state['handle']()
            await client.close()
        return state['error']

    try:
        error = asyncio.run(run())
    except KeyboardInterrupt:
        return

    if error is not None:
        raise click.ClickException(str(error))
