"""CLI entry point for grantlens."""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.syntax import Syntax
from rich.table import Table

from grantlens.calculator import (
    GLOBAL_SPACE_ID,
    CalculatedPrivilege,
    PrivilegeCalculatorError,
    PrivilegeCalculatorFactory,
    PrivilegeExplanation,
)
from grantlens.catalog import InMemoryPrivilegeCatalog
from grantlens.config import GrantlensConfig, load_config, load_definitions, load_role
from grantlens.config.loader import DEFAULT_CONFIG_TEMPLATE

app = typer.Typer(
    name="grantlens",
    help="Explain effective feature privileges across spaces.",
)

config_app = typer.Typer(help="Manage grantlens configuration.")
app.add_typer(config_app, name="config")


class OutputFormat(str, Enum):
    table = "table"
    json = "json"


# Global state
_config: GrantlensConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}
_TEXT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JsonLogFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "logger": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonLogFormatter()
    return logging.Formatter(_TEXT_LOG_FORMAT)


def _get_config() -> GrantlensConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to grantlens.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    handler = logging.StreamHandler()
    handler.setFormatter(_build_formatter(_config.log_format))
    logging.basicConfig(level=_LOG_LEVELS[_config.log_level], handlers=[handler])


def _load_factory(definitions: str | None, cfg: GrantlensConfig) -> PrivilegeCalculatorFactory:
    """Build a calculator factory from --definitions or the configured path."""
    path = definitions or cfg.definitions.path
    if path is None:
        rprint("[red]Error:[/red] no privilege definitions given (use --definitions or set definitions.path)")
        raise typer.Exit(1)
    try:
        catalog = InMemoryPrivilegeCatalog(load_definitions(path))
        return PrivilegeCalculatorFactory(catalog)
    except FileNotFoundError:
        rprint(f"[red]Error:[/red] definitions file not found: {path}")
        raise typer.Exit(1)
    except (ValueError, PrivilegeCalculatorError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _source_label(explanation: PrivilegeExplanation) -> str:
    label = explanation.actual_privilege_source.value
    return label if explanation.is_directly_assigned else f"{label} (inherited)"


def _superseded_label(explanation: PrivilegeExplanation) -> str:
    if explanation.superseded_privilege is None:
        return "-"
    return f"{explanation.superseded_privilege} ({explanation.superseded_privilege_source.value})"


def _display_calculated(
    space_id: str,
    calculated: CalculatedPrivilege,
    factory: PrivilegeCalculatorFactory,
    show_levels: bool,
) -> None:
    """Display a space's effective privileges as a Rich table."""
    table = Table(title=f"Effective privileges: {space_id}")
    table.add_column("Feature", style="cyan")
    table.add_column("Privilege", style="green")
    table.add_column("Source")
    table.add_column("Supersedes", style="yellow")
    if show_levels:
        table.add_column("Levels", style="dim")

    rows = [("(base)", calculated.base, factory.ranked_base_levels)]
    rows += [
        (feature_id, explanation, factory.ranked_feature_levels.get(feature_id, []))
        for feature_id, explanation in calculated.feature.items()
    ]
    for name, explanation, levels in rows:
        cells = [name, explanation.actual_privilege, _source_label(explanation), _superseded_label(explanation)]
        if show_levels:
            cells.append(", ".join(levels) or "-")
        table.add_row(*cells)
    rprint(table)


@app.command()
def explain(
    role_file: str = typer.Argument(..., help="Path to a role YAML file"),
    space: str = typer.Option(GLOBAL_SPACE_ID, "--space", "-s", help="Space id ('*' for global)"),
    feature: str | None = typer.Option(None, "--feature", "-f", help="Explain a single feature"),
    ignore_assigned: bool = typer.Option(
        False, "--ignore-assigned", help="Preview privileges as if direct assignments were removed"
    ),
    definitions: str | None = typer.Option(None, "--definitions", "-d", help="Privilege definitions YAML"),
    output_format: OutputFormat | None = typer.Option(None, "--format", help="Output format"),
) -> None:
    """Explain the effective privileges a role holds in a space."""
    cfg = _get_config()
    fmt = output_format.value if output_format else cfg.output.format
    factory = _load_factory(definitions, cfg)

    if feature is not None and feature not in factory.ranked_feature_levels:
        rprint(f"[red]Error:[/red] unknown feature '{feature}'")
        raise typer.Exit(1)

    try:
        role = load_role(role_file)
        calculator = factory.get_calculator(role)
        if feature is None:
            calculated = calculator.explain_space(space, ignore_assigned)
        else:
            calculated = CalculatedPrivilege(
                base=calculator.explain_base(space, ignore_assigned),
                feature={feature: calculator.resolve(feature, space, ignore_assigned)},
            )
    except FileNotFoundError:
        rprint(f"[red]Error:[/red] role file not found: {role_file}")
        raise typer.Exit(1)
    except (ValueError, PrivilegeCalculatorError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if fmt == "json" and feature is not None:
        typer.echo(calculated.feature[feature].model_dump_json(indent=2))
    elif fmt == "json":
        typer.echo(calculated.model_dump_json(indent=2))
    else:
        _display_calculated(space, calculated, factory, cfg.output.show_levels)


@app.command()
def allowed(
    role_file: str = typer.Argument(..., help="Path to a role YAML file"),
    definitions: str | None = typer.Option(None, "--definitions", "-d", help="Privilege definitions YAML"),
    output_format: OutputFormat | None = typer.Option(None, "--format", help="Output format"),
) -> None:
    """Show which privileges can still be assigned in each of a role's specs."""
    cfg = _get_config()
    fmt = output_format.value if output_format else cfg.output.format
    factory = _load_factory(definitions, cfg)

    try:
        role = load_role(role_file)
        results = factory.get_allowed_calculator().calculate_allowed_privileges(
            factory.get_calculator(role)
        )
    except FileNotFoundError:
        rprint(f"[red]Error:[/red] role file not found: {role_file}")
        raise typer.Exit(1)
    except (ValueError, PrivilegeCalculatorError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if fmt == "json":
        payload = [
            {"spaces": spec.spaces or [GLOBAL_SPACE_ID], **result.model_dump()}
            for spec, result in zip(role.privileges, results)
        ]
        typer.echo(json.dumps(payload, indent=2))
        return

    for spec, result in zip(role.privileges, results):
        table = Table(title=f"Allowed privileges: {', '.join(spec.spaces) or GLOBAL_SPACE_ID}")
        table.add_column("Feature", style="cyan")
        table.add_column("Allowed", style="green")
        table.add_column("Can unassign", justify="center")
        table.add_row("(base)", ", ".join(result.base.privileges) or "-", "yes" if result.base.can_unassign else "no")
        for feature_id, levels in result.feature.items():
            table.add_row(feature_id, ", ".join(levels.privileges) or "-", "yes" if levels.can_unassign else "no")
        rprint(table)


@app.command()
def features(
    definitions: str | None = typer.Option(None, "--definitions", "-d", help="Privilege definitions YAML"),
) -> None:
    """List features and their levels, most permissive first."""
    cfg = _get_config()
    factory = _load_factory(definitions, cfg)

    table = Table(title=f"Features ({len(factory.ranked_feature_levels)})")
    table.add_column("Feature", style="cyan")
    table.add_column("Levels", style="green")
    for feature_id, levels in factory.ranked_feature_levels.items():
        table.add_row(feature_id, ", ".join(levels) or "-")
    rprint(table)
    rprint(f"[dim]Base levels:[/dim] {', '.join(factory.ranked_base_levels) or '-'}")


# ---------------------------------------------------------------------------
# Config commands
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    import yaml

    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default grantlens.yaml in current directory."""
    target = Path("grantlens.yaml")
    if target.exists() and not force:
        rprint("[yellow]grantlens.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
