"""Typer CLI for provisioning triggers."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from provision_trigger.behaviour.registry import BehaviourRegistry, register_trigger
from provision_trigger.config.loader import load_trigger_config
from provision_trigger.config.models import TriggerConfig
from provision_trigger.observability.logging_config import configure_logging
from provision_trigger.page.dialogs import ConsoleDialogs
from provision_trigger.page.dom import Document, Element
from provision_trigger.page.notifications import AnchorNotFoundError
from provision_trigger.page.parser import load_page
from provision_trigger.strategies.async_requester import AsyncRequester
from provision_trigger.strategies.base import StrategyType
from provision_trigger.strategies.factory import create_strategy
from provision_trigger.strategies.form_relay import FormRelay
from provision_trigger.strategies.outcome import ActivationState, interpret

console = Console()
app = typer.Typer(name="ptrigger", help="Provisioning trigger CLI")


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON logs"),
) -> None:
    configure_logging(log_level, json=json_logs)


def _load_config(config_path: str | None) -> TriggerConfig:
    try:
        return load_trigger_config(Path(config_path) if config_path else None)
    except (FileNotFoundError, ValueError, TypeError) as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        raise typer.Exit(1) from exc


def _load_page(page_path: str) -> Document:
    path = Path(page_path)
    if not path.exists():
        console.print(f"[red]Page not found: {path}[/red]")
        raise typer.Exit(1)
    return load_page(path)


def _find_trigger(document: Document, config: TriggerConfig, template: str) -> Element:
    for element in document.query_selector_all(config.selector):
        if element.dataset.get("url") == template:
            return element
    console.print(f"[red]No trigger for template '{template}' on page[/red]")
    raise typer.Exit(1)


@app.command()
def validate(
    config_path: str | None = typer.Option(None, "--config", help="Trigger YAML"),
) -> None:
    """Validate a trigger configuration file."""
    config = _load_config(config_path)
    console.print(f"[green]Valid[/green] — strategy={config.strategy}")
    console.print(f"  selector: {config.selector}")
    console.print(f"  anchor:   #{config.notification.anchor_id}")
    console.print(f"  csrf:     {config.csrf.mode}")
    console.print(f"  base url: {config.base_url or '(none)'}")


@app.command()
def scan(
    page_path: str = typer.Argument(..., help="Path to an HTML page"),
    config_path: str | None = typer.Option(None, "--config", help="Trigger YAML"),
) -> None:
    """List the provisioning triggers on a page."""
    config = _load_config(config_path)
    document = _load_page(page_path)
    triggers = document.query_selector_all(config.selector)
    if not triggers:
        console.print("[yellow]No triggers found[/yellow]")
        return

    table = Table(title=f"Triggers — {page_path}")
    table.add_column("Template", style="cyan")
    table.add_column("Strategy")
    table.add_column("Target")
    for element in triggers:
        data = element.dataset
        if "cloud" in data:
            strategy, target = StrategyType.ASYNC_REQUESTER, data["cloud"]
        else:
            strategy, target = StrategyType.FORM_RELAY, f"#{data.get('form', '')}"
        table.add_row(data.get("url", ""), strategy.value, target)
    console.print(table)


@app.command()
def activate(
    page_path: str = typer.Argument(..., help="Path to an HTML page"),
    template: str = typer.Argument(..., help="Template name to provision"),
    config_path: str | None = typer.Option(None, "--config", help="Trigger YAML"),
    base_url: str | None = typer.Option(None, "--base-url", help="Server base URL"),
) -> None:
    """Click the trigger for TEMPLATE and report the outcome."""
    config = _load_config(config_path)
    if base_url is not None:
        config = config.model_copy(update={"base_url": base_url})
    document = _load_page(page_path)
    trigger = _find_trigger(document, config, template)

    try:
        strategy = create_strategy(config, document=document, dialogs=ConsoleDialogs())
    except AnchorNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    registry = BehaviourRegistry()
    register_trigger(registry, strategy, config.marker, config.behaviour_priority)
    registry.apply(document)

    if isinstance(strategy, AsyncRequester):
        asyncio.run(_click_and_wait(strategy, trigger))
        activation = strategy.activations[-1]
        assert activation.outcome is not None
        if activation.state == ActivationState.FAILED:
            raise typer.Exit(1)
        console.print(f"[green]{interpret(activation.outcome).notification}[/green]")
        return

    assert isinstance(strategy, FormRelay)
    with strategy:
        trigger.click()
    navigation = document.navigation
    if navigation is None:
        console.print("[red]Form not found; nothing was submitted[/red]")
        raise typer.Exit(1)
    style = "green" if navigation.status_code < 400 else "red"
    console.print(
        f"[{style}]Submitted[/{style}] → {navigation.url} ({navigation.status_code})"
    )
    if navigation.status_code >= 400:
        raise typer.Exit(1)


async def _click_and_wait(strategy: AsyncRequester, trigger: Element) -> None:
    async with strategy:
        trigger.click()
        await strategy.drain()
