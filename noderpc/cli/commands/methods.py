# noderpc/cli/commands/methods.py

import click


@click.command('methods')
@click.option('--api', help='Only methods of this API')
@click.pass_context
def methods(ctx, api):
    """List the generated methods and their parameters"""
    client = ctx.obj['cli_context'].client

    for name, generated in client.methods.methods.items():
        descriptor = generated.descriptor
        if api and descriptor.api != api:
            continue
        params = ", ".join(descriptor.params)
        click.echo(f"{name}({params})  [{descriptor.api}.{descriptor.method}]")
