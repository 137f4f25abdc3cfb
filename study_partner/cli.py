"""Typer CLI: analyze a photo locally or against a server, manage the stored API key, run the API."""

import base64
from pathlib import Path

import typer
from PIL import Image, UnidentifiedImageError
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table
from rich.text import Text

from study_partner.ai.factory import get_vision_model
from study_partner.ai.schema import AnalysisResult, Card, Mode
from study_partner.core.analysis import AnalysisService
from study_partner.core.client import StudyClient
from study_partner.core.config import get_config
from study_partner.core.credentials import CredentialStore, mask_secret
from study_partner.core.export import write_cards_csv
from study_partner.core.logging import setup_logging
from study_partner.core.session import Phase, SessionState, run_analysis

app = typer.Typer(no_args_is_help=True)
key_app = typer.Typer(help="Set, show, or delete the stored API key.")
app.add_typer(key_app, name="key")


def _credential_store() -> CredentialStore:
    return CredentialStore(get_config().credentials_path)


def encode_image_file(path: Path) -> str:
    """Read an image file and return it as a data URL. The MIME type comes from the decoded format."""
    try:
        with Image.open(path) as img:
            fmt = img.format
    except UnidentifiedImageError:
        raise typer.BadParameter(f"Not a readable image: {path}") from None
    mime_type = Image.MIME.get(fmt or "", "image/jpeg")
    payload = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def _print_cards(console: Console, cards: list[Card]) -> None:
    if not cards:
        console.print("No cards were generated. Try another image.")
        return
    table = Table(title=f"{len(cards)} cards")
    table.add_column("#", justify="right")
    table.add_column("Front")
    table.add_column("Back")
    for i, card in enumerate(cards, start=1):
        table.add_row(str(i), Text(card.front), Text(card.back))
    console.print(table)


def _print_result(console: Console, result: AnalysisResult, mode: Mode) -> None:
    data = result.data
    if mode == Mode.ANKI:
        _print_cards(console, data.cards or [])
        return
    if mode == Mode.GRADE:
        score = "n/a" if data.score is None else f"{data.score}/100"
        console.print(f"[bold]Score:[/bold] {score}")
    # Model text is printed literally; brackets in it are not rich markup.
    console.print(Markdown(data.content) if mode != Mode.OCR else Text(data.content))


@app.command()
def analyze(
    image_path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Photo to analyze"),
    mode: Mode = typer.Option(Mode.SOLVE, "--mode", "-m", case_sensitive=False, help="SOLVE, GRADE, OCR, or ANKI"),
    context: str | None = typer.Option(None, "--context", "-c", help="Extra notes appended to the instruction"),
    credential: str | None = typer.Option(None, "--credential", help="API key; overrides stored and configured keys"),
    server: str | None = typer.Option(None, "--server", help="Send the request to this API base URL instead of calling the model directly"),
    remote: bool = typer.Option(False, "--remote", help="Send the request to the configured api_base_url"),
    csv_path: Path | None = typer.Option(None, "--csv", help="ANKI only: also write cards to this CSV file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show DEBUG logging on stderr"),
) -> None:
    """Analyze one photo and print the solution, grade, transcript, or flashcards."""
    setup_logging("DEBUG" if verbose else None)
    cfg = get_config()
    console = Console()

    if remote and not server:
        server = cfg.api_base_url
    if server:
        client = StudyClient(server, timeout=cfg.client_timeout_seconds)
    else:
        client = AnalysisService(get_vision_model(cfg.analyzer, cfg), cfg)

    state = SessionState().select_mode(mode).with_credential(credential or _credential_store().get())
    state = state.start_capture()
    image = encode_image_file(image_path)

    with console.status(f"Analyzing ({mode.value})..."):
        state = run_analysis(state, client, image, context)
    result = state.result

    if state.phase == Phase.showing_error:
        typer.secho(result.error or "Analysis failed.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    _print_result(console, result, mode)

    if csv_path is not None:
        if mode != Mode.ANKI:
            typer.secho("--csv only applies to ANKI mode; nothing written.", fg=typer.colors.YELLOW, err=True)
        elif result.data.cards:
            written = write_cards_csv(result.data.cards, csv_path)
            typer.echo(f"Wrote {len(result.data.cards)} cards to {written}")
        else:
            typer.secho("No cards to export.", fg=typer.colors.YELLOW, err=True)


@key_app.command("set")
def key_set(value: str = typer.Argument(..., help="API key to store")) -> None:
    """Store the API key used when --credential is not given."""
    value = value.strip()
    if not value:
        typer.secho("API key must not be empty.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    store = _credential_store()
    store.set(value)
    typer.echo(f"API key saved to {store.path}.")


@key_app.command("show")
def key_show() -> None:
    """Show the stored API key, masked."""
    value = _credential_store().get()
    if value is None:
        typer.echo("No API key stored.")
        return
    typer.echo(mask_secret(value))


@key_app.command("delete")
def key_delete() -> None:
    """Delete the stored API key."""
    if _credential_store().delete():
        typer.echo("API key deleted.")
    else:
        typer.echo("No API key stored.")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(3000, "--port", help="Bind port"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    setup_logging()
    uvicorn.run("study_partner.api.main:app", host=host, port=port)


if __name__ == "__main__":
    app()
