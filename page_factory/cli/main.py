"""
CLI entrypoint.

doctor: print effective settings and the resolved timeout table.
open:   open a URL in a real browser through a Session and run bind+hook
        (optional identifier locator and path check), reporting the outcome.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..actions.platforms import Platform
from ..browser.session import Session
from ..core.errors import PageFactoryError
from ..core.log import setup_logging
from ..core.settings import settings
from ..io.playwright_driver import PlaywrightDriver
from ..pages.base import TopLevelPage, web_page_path

app = typer.Typer(help="page-factory CLI")
console = Console()


@app.command("doctor")
def doctor() -> None:
    """Environment check: print key settings and every timeout category."""
    try:
        policy = settings.timeout_policy()
    except PageFactoryError as e:
        typer.secho(f"[doctor] {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    console.print("[bold green]page-factory[/] environment")
    console.print(f"- base url: {settings.base_url}")
    console.print(f"- browser:  {settings.browser} (headless={settings.headless})")
    console.print(f"- platform: {settings.platform}")

    table = Table(title="Timeouts", show_header=True, header_style="bold")
    table.add_column("category")
    table.add_column("seconds", justify="right")
    for name, seconds in policy.as_table().items():
        table.add_row(name, str(seconds))
    console.print(table)
    console.print(
        f"poll every {policy.poll_interval_millis} ms, "
        f"{policy.pause_between_keys_millis} ms between keys, "
        f"implicit wait {policy.implicit_wait_millis} ms"
    )


@app.command("open")
def open_page(
    url: str = typer.Argument(..., help="Absolute URL, or a path joined onto PF_BASE_URL"),
    page_identifier: Optional[str] = typer.Option(
        None, "--page-identifier", help="CSS selector that must be present once loaded"
    ),
    path: Optional[str] = typer.Option(None, "--path", help="Expected URL path of the page"),
    regex: bool = typer.Option(False, "--regex", help="Treat --path as a regular expression"),
    headless: bool = typer.Option(True, "--headless/--no-headless", help="Run browser headless"),
    screenshot: Optional[str] = typer.Option(None, "--screenshot", help="Save a PNG here afterwards"),
) -> None:
    """Open a page and run its load hook; non-zero exit on failure."""
    setup_logging(settings.log_level)
    try:
        policy = settings.timeout_policy()
    except PageFactoryError as e:
        typer.secho(f"[open] {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    # A one-off page class carrying the identifier and path given on the command line.
    page_cls = type("CommandLinePage", (TopLevelPage,), {"page_identifier": page_identifier})
    if path:
        page_cls = web_page_path(path, regex=regex)(page_cls)

    driver = PlaywrightDriver(
        headless=headless,
        browser=settings.browser,
        implicit_wait_ms=policy.implicit_wait_millis,
        page_load_timeout_ms=policy.page_load_timeout_seconds * 1000,
    ).start()
    session = Session(driver, base_url=settings.base_url, timeouts=policy, platform=Platform.WEB)
    try:
        session.open_page_by_url(url, page_cls)
        console.print(f"[green]OK[/] loaded {session.current_url()} ({session.state.value})")
        if screenshot:
            console.print(f"screenshot: {session.save_screenshot(screenshot)}")
    except PageFactoryError as e:
        typer.secho(f"[open] {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    finally:
        session.quit()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
