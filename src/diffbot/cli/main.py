import logging
import typing as t
from typing import Annotated

import httpx
import typer
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from diffbot.cli.enums import Kind
from diffbot.client import Diffbot
from diffbot.constants import __version__
from diffbot.exceptions import ConfigurationError, DiffbotError
from diffbot.models import Frontpage, Model
from diffbot.request import DiffbotRequest
from diffbot.utils.logging import setup_logging

app = typer.Typer(no_args_is_help=True)

def build_client(ctx: typer.Context, token: str | None, **settings: t.Any) -> Diffbot:
    # An httpx.Client passed as the context object, e.g. app(obj=client), carries every call
    http_client = ctx.obj if isinstance(ctx.obj, httpx.Client) else None
    try:
        return Diffbot(token, http_client=http_client, **settings)
    except ConfigurationError as error:
        print(f"[red]{escape(str(error))}[/red]")
        raise typer.Exit(2)


def build_request(
    client: Diffbot, kind: Kind, url: str, fields: str | None
) -> DiffbotRequest[t.Any]:
    builders = {
        Kind.article: client.article,
        Kind.frontpage: client.frontpage,
        Kind.image: client.images,
        Kind.product: client.products,
        Kind.classifier: client.classifier,
    }
    request = builders[kind](url)
    if fields is not None and hasattr(request, "with_fields"):
        request = request.with_fields(fields)
    return request


def describe(result: Model) -> str:
    if isinstance(result, Frontpage):
        title = result.info.title if result.info is not None else None
        return f"{title or ''} ({len(result.items or [])} items)"
    return str(getattr(result, "title", None) or "")


def _kind_option() -> t.Any:
    return typer.Option("-k", "--kind", help="The Diffbot API to call")


def _token_option() -> t.Any:
    return typer.Option(
        "--token", help="Developer token, defaults to the DIFFBOT_TOKEN environment variable"
    )


@app.callback()
def main_callback(
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Log batching activity")
    ] = False,
):
    """Call the Diffbot extraction APIs"""
    setup_logging(level=logging.DEBUG if verbose else logging.WARNING)


@app.command(name="analyze")
def analyze(
    ctx: typer.Context,
    urls: Annotated[list[str], typer.Argument(help="The web pages to analyze")],
    kind: Annotated[Kind, _kind_option()] = Kind.article,
    fields: Annotated[
        str | None, typer.Option(help="Fields to return, e.g. meta,tags,images(*)")
    ] = None,
    max_batch: Annotated[
        int, typer.Option("--max-batch", help="Maximum number of requests per batch call")
    ] = 25,
    concurrency: Annotated[
        int, typer.Option(help="Maximum number of batch calls sent in parallel")
    ] = 1,
    token: Annotated[str | None, _token_option()] = None,
):
    """Queue every URL and analyze them through the batch API"""
    with build_client(
        ctx, token, max_batch_request=max_batch, concurrent_batch_request=concurrency
    ) as client:
        pending = [build_request(client, kind, url, fields).queue() for url in urls]
        table = Table(title=f"Diffbot {kind} results")
        table.add_column("URL")
        table.add_column("Status")
        table.add_column("Title / Error")
        failed = 0
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Sending batch requests...", total=None)
            for url, result in zip(urls, pending):
                try:
                    value = result.result()
                except DiffbotError as error:
                    failed += 1
                    table.add_row(url, "[red]error[/red]", escape(str(error)))
                else:
                    table.add_row(url, "[green]ok[/green]", escape(describe(value)))
    console = Console()
    console.print(table)
    if failed:
        raise typer.Exit(1)


@app.command(name="fetch")
def fetch(
    ctx: typer.Context,
    url: Annotated[str, typer.Argument(help="The web page to analyze")],
    kind: Annotated[Kind, _kind_option()] = Kind.article,
    fields: Annotated[
        str | None, typer.Option(help="Fields to return, e.g. meta,tags,images(*)")
    ] = None,
    token: Annotated[str | None, _token_option()] = None,
):
    """Analyze a single URL without batching and print the result as JSON"""
    with build_client(ctx, token) as client:
        try:
            result = build_request(client, kind, url, fields).execute()
        except DiffbotError as error:
            print(f"[red]{type(error).__name__}: {escape(str(error))}[/red]")
            raise typer.Exit(1)
    typer.echo(result.model_dump_json(indent=2, exclude_none=True))


@app.command()
def version():
    """Get the version of the package"""
    typer.echo(__version__)
    raise typer.Exit()
