"""
Web Replay - CLI Entry Point.

Configuration Priority:
    1. CLI arguments (--browser, --config, ...)
    2. Environment variables (WEB_REPLAY__REPLAY__NAVIGATION_SETTLE_MS, etc.)
    3. Config file (--config, $WEB_REPLAY_CONFIG or web-replay.yaml)

Usage:
    web-replay record https://example.com --output traces/
    web-replay replay traces/trace-2024-01-01T10-00-00.json
    web-replay check trace.json --html saved-page.html
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from web_replay import __version__
from web_replay.browsers.playwright_browser import PlaywrightBrowser
from web_replay.browsers.snapshot import SnapshotPage
from web_replay.config import load_config
from web_replay.config.settings import Settings
from web_replay.exceptions import WebReplayError
from web_replay.locators.resolver import LocatorResolver
from web_replay.modes.base import ModeConfig
from web_replay.modes.record_replay import RecordReplayMode
from web_replay.recorder.steps import ClickStep, describe_step, display_locators
from web_replay.recorder.trace import load_trace
from web_replay.utils.logging import configure_logging, setup_logging

# Create the CLI app
app = typer.Typer(
    name="web-replay",
    help="Record web page interactions as traces and replay them step by step",
    add_completion=False,
)

console = Console()


def _settings(config: Optional[str], browser: Optional[str] = None) -> Settings:
    """Load settings, applying the --browser channel override."""
    overrides = {}
    if browser and browser != "chromium":
        overrides["browser"] = {"channel": browser}
    return load_config(config_path=config, **overrides)


def _fail(message: str) -> None:
    console.print(f"[red]✗ {message}[/red]")
    raise typer.Exit(1)


async def _open_page(browser: PlaywrightBrowser, settings: Settings):
    launch_options = {}
    if settings.browser.channel:
        launch_options["channel"] = settings.browser.channel
    await browser.launch(
        headless=settings.browser.headless,
        browser_type=settings.browser.browser_type,
        **launch_options,
    )
    return await browser.new_page(
        viewport_width=settings.browser.viewport_width,
        viewport_height=settings.browser.viewport_height,
        timeout_ms=settings.browser.timeout_ms,
    )


async def _prompt(message: str) -> str:
    """Read a line from the terminal without blocking the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, console.input, message)


@app.command()
def record(
    url: str = typer.Argument(..., help="Page to start recording on"),
    output: str = typer.Option(".", "--output", "-o", help="Trace file or directory"),
    browser: str = typer.Option("chromium", "--browser", "-b", help="Browser: chromium, chrome, msedge"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config file"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Record interactions in a visible browser until Enter is pressed.

    Examples:
        web-replay record https://example.com
        web-replay record https://example.com --output my-trace.json -b chrome
    """
    try:
        settings = _settings(config, browser)
    except WebReplayError as e:
        _fail(str(e))
    configure_logging(settings.logging, "DEBUG" if verbose else None)

    console.print(Panel.fit(
        f"[bold blue]⏺ Web Replay - Record[/bold blue]\n"
        f"[dim]URL:[/dim] {url}\n"
        f"[dim]Output:[/dim] {output}",
        border_style="blue",
    ))

    ok = asyncio.run(_record_async(url, output, settings))
    if not ok:
        raise typer.Exit(1)


async def _record_async(url: str, output: str, settings: Settings) -> bool:
    browser = PlaywrightBrowser()
    mode = RecordReplayMode()
    try:
        page = await _open_page(browser, settings.merge_with({"browser": {"headless": False}}))
        await page.goto(url)
        await mode.start(page, ModeConfig(settings=settings))

        result = await mode.execute({"action": "record"})
        if not result.success:
            console.print(f"[red]✗ Could not start recording: {result.error}[/red]")
            return False

        console.print("[green]● Recording.[/green] Interact with the page.")
        await _prompt("[dim]Press Enter to stop recording...[/dim]")

        result = await mode.execute({"action": "stop"})
        if not result.success:
            console.print(f"[yellow]⚠ {result.error}[/yellow]")

        exported = await mode.execute({"action": "export", "output_path": output})
        if not exported.success:
            console.print(f"[red]✗ {exported.error}[/red]")
            return False

        console.print(f"[green]✓ Saved {exported.steps_executed} steps to {exported.data['saved_to']}[/green]")
        return True

    except WebReplayError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        logging.exception("Recording failed")
        return False

    finally:
        await mode.stop()
        await browser.close()


@app.command()
def replay(
    file_path: str = typer.Argument(..., help="Trace file to replay"),
    browser: str = typer.Option("chromium", "--browser", "-b", help="Browser: chromium, chrome, msedge"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config file"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Replay a trace one step at a time.

    Press Enter to run the next step, or type q to stop.
    """
    try:
        settings = _settings(config, browser)
        trace = load_trace(file_path)
    except WebReplayError as e:
        _fail(str(e))
    configure_logging(settings.logging, "DEBUG" if verbose else None)

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("#", width=3)
    table.add_column("Step")
    for i, step in enumerate(trace.steps, 1):
        table.add_row(str(i), escape(describe_step(step)))

    console.print(Panel.fit(
        f"[bold blue]▶ Web Replay - Replay[/bold blue]\n"
        f"[dim]Trace:[/dim] {Path(file_path).name}\n"
        f"[dim]Steps:[/dim] {len(trace.steps)}",
        border_style="blue",
    ))
    console.print(table)

    ok = asyncio.run(_replay_async(trace.to_dict(), settings))
    if not ok:
        raise typer.Exit(1)


async def _replay_async(trace: dict, settings: Settings) -> bool:
    browser = PlaywrightBrowser()
    mode = RecordReplayMode()
    try:
        page = await _open_page(browser, settings)
        await mode.start(page, ModeConfig(settings=settings))

        for action in ({"action": "load", "trace": trace}, {"action": "replay"}):
            result = await mode.execute(action)
            if not result.success:
                console.print(f"[red]✗ {result.error}[/red]")
                return False

        while True:
            answer = await _prompt("[dim]Enter: next step, q: stop[/dim] ")
            if answer.strip().lower() == "q":
                await mode.execute({"action": "replay_stop"})
                console.print("[yellow]Replay stopped[/yellow]")
                return True

            result = await mode.execute({"action": "step"})
            data = result.data or {}
            label = f"Step {data.get('index', 0) + 1}: {data.get('description', '')}"
            if not result.success:
                console.print(f"  [red]✗ {label}[/red] - {result.error}")
                return False

            matched = f" [dim](matched by {data['locator_type']})[/dim]" if data.get("locator_type") else ""
            console.print(f"  [green]✓ {label}[/green]{matched}")
            if data.get("completed"):
                console.print(Panel.fit("[bold green]✓ Replay complete[/bold green]", border_style="green"))
                return True

    except WebReplayError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        logging.exception("Replay failed")
        return False

    finally:
        await mode.stop()
        await browser.close()


@app.command()
def check(
    file_path: str = typer.Argument(..., help="Trace file to check"),
    html: str = typer.Option(..., "--html", help="Saved HTML page to resolve click targets against"),
    url: str = typer.Option("about:blank", "--url", help="URL the page was saved from"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Resolve every click step of a trace against a saved page, offline.

    Exits with code 1 if any click target cannot be found.
    """
    setup_logging("DEBUG" if verbose else "WARNING")

    try:
        trace = load_trace(file_path)
    except WebReplayError as e:
        _fail(str(e))

    if not Path(html).is_file():
        _fail(f"File not found: {html}")

    rows, unresolved = asyncio.run(_check_async(trace.steps, html, url))

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", width=3)
    table.add_column("Locators", style="dim")
    table.add_column("Matched by")
    for row in rows:
        table.add_row(*row)
    console.print(table)

    clicks = len(rows)
    if unresolved:
        console.print(f"[red]✗ {unresolved}/{clicks} click targets not found[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓ All {clicks} click targets found[/green]")


async def _check_async(steps, html: str, url: str):
    page = SnapshotPage.from_file(html, url=url)
    resolver = LocatorResolver()
    rows = []
    unresolved = 0
    for index, step in enumerate(steps, 1):
        if not isinstance(step, ClickStep):
            continue
        target = await resolver.resolve(page, step.target.locators)
        if target.is_resolved:
            matched = f"[green]{target.strategy}[/green]"
        else:
            matched = "[red]not found[/red]"
            unresolved += 1
        rows.append((str(index), escape(", ".join(display_locators(step))), matched))
    return rows, unresolved


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold]Web Replay[/bold] v{__version__}")


if __name__ == "__main__":
    app()
