import traceback
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from shapegen.codegen.codegen import Codegen
from shapegen.codegen.loader import ServiceLoader
from shapegen.codegen.protocol import PROTOCOL_NAMES
from shapegen.config import get_config
from shapegen.exceptions import ShapegenError

console = Console()
app = typer.Typer(
    name='shapegen',
    help='Generate Python clients from botocore-style service models',
    no_args_is_help=True,
)


@app.command()
def generate(
    config: Annotated[
        str | None,
        typer.Option(
            '--config', '-c', help='Path to configuration file (YAML or JSON)'
        ),
    ] = None,
) -> None:
    """Generate Python client code from configuration.

    If no config file is specified, will look for shapegen.yaml in the
    current directory or a [tool.shapegen] table in pyproject.toml.

    Examples:
        shapegen generate
        shapegen generate --config my-config.yaml
        shapegen generate -c config.json
    """
    try:
        config = get_config(config)

        for service_config in config.services:
            with Progress(
                SpinnerColumn(),
                TextColumn('[progress.description]{task.description}'),
                console=console,
            ) as progress:
                task = progress.add_task(
                    f'Generating code for {service_config.source} in {service_config.output}...',
                    total=None,
                )

                codegen = Codegen(service_config, max_workers=config.max_workers)
                files = codegen.generate()

                progress.update(
                    task,
                    description=f'Code generation completed for {service_config.source}!',
                )
            console.print('[dim]Generated files:[/dim]')
            for file in files:
                console.print(f'  - {file}')

        console.print('[green]Successfully generated code[/green]')

    except Exception as e:
        console.print(f'[red]Error:[/red] {str(e)}')
        traceback.print_exc()
        raise typer.Exit(1)


@app.command()
def validate(
    source: Annotated[str, typer.Argument(help='Path or URL of the service model')],
) -> None:
    """Load a service model and check it can be generated from.

    Examples:
        shapegen validate models/s3-2006-03-01.json
    """
    try:
        service = ServiceLoader().load(source)
    except ShapegenError as e:
        console.print(f'[red]Invalid:[/red] {e.message}')
        raise typer.Exit(1)

    protocol = service.metadata.protocol
    table = Table(title=service.metadata.service_full_name or service.service_type_name)
    table.add_column('Property', style='cyan')
    table.add_column('Value')
    table.add_row('Client', service.client_type_name)
    table.add_row('API version', service.metadata.api_version)
    table.add_row('Protocol', protocol)
    table.add_row('Operations', str(len(service.operations)))
    table.add_row('Shapes', str(len(service.shapes)))
    console.print(table)

    if protocol not in PROTOCOL_NAMES:
        console.print(
            f"[yellow]Warning:[/yellow] no generator for protocol '{protocol}'"
        )
        raise typer.Exit(1)
    console.print('[green]Service model is valid[/green]')


@app.command()
def version() -> None:
    """Show the version of shapegen."""
    try:
        from shapegen._version import version

        console.print(f'shapegen version: {version}')
    except ImportError:
        console.print('shapegen version: unknown')


if __name__ == '__main__':
    app()
