# src/kvalidator/cli/formatter.py
from typing import Iterable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from kvalidator.comparison.context import ValidationContext
from kvalidator.core.models import FlatObject, NamespaceStatus, OverallStatus, Summary
from kvalidator.rules.ignore import IgnoreRule

STATUS_STYLES = {
    NamespaceStatus.BASELINE: "cyan",
    NamespaceStatus.IDENTICAL: "green",
    NamespaceStatus.DIFFERENT: "yellow",
    NamespaceStatus.MISSING: "red",
    NamespaceStatus.EXTRA: "magenta",
}


class KValidatorFormatter:
    """
    KValidatorFormatter: the visual side of the CLI.
    Renders the status matrix, difference details, summaries and rule lists.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_header(self, title: str, subtitle: str):
        self.console.print(Panel.fit(
            f"[bold cyan]{title}[/bold cyan]\n"
            "══════════════════════════════════════════════════════════════════",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def render_matrix(self, context: ValidationContext):
        """
        One row per object, one column per namespace (baseline first).
        """
        result = context.result
        if result is None or not result.objects:
            self.console.print("[bold yellow]⚠️  No objects to compare.[/bold yellow]")
            return

        table = Table(title="Validation Matrix", show_lines=True, header_style="bold magenta")
        table.add_column("Kind", style="white")
        table.add_column("Object", style="cyan")
        for label in result.labels:
            suffix = " (baseline)" if label == result.baseline_label else ""
            table.add_column(escape(f"{label}{suffix}"), justify="center")
        table.add_column("Overall", justify="center")

        for key in sorted(result.objects):
            entry = result.objects[key]
            cells = []
            for label in result.labels:
                status = result.status_for(key, label)
                color = STATUS_STYLES.get(status.status, "white")
                text = status.status.value
                if status.status is NamespaceStatus.DIFFERENT:
                    text = f"{text} ({status.difference_count})"
                cells.append(f"[{color}]{text}[/{color}]")

            icon = "✅" if entry.overall is OverallStatus.OK else "❌"
            table.add_row(escape(key.kind), escape(key.name), *cells, f"{icon} {entry.overall.value}")

        self.console.print(table)

    def render_details(self, context: ValidationContext):
        """Prints a panel with the difference details of each NOK object."""
        result = context.result
        if result is None:
            return

        for key in sorted(result.objects):
            entry = result.objects[key]
            if entry.overall is OverallStatus.OK:
                continue

            lines: List[str] = []
            for label in result.target_labels:
                status = result.status_for(key, label)
                if status.status is NamespaceStatus.IDENTICAL:
                    continue
                color = STATUS_STYLES.get(status.status, "white")
                lines.append(f"[bold {color}]{escape(label)}: {status.status.value}[/bold {color}]")
                lines.extend(f"  • {escape(detail)}" for detail in status.details)

            self.console.print(Panel(
                "\n".join(lines) or "[dim]No details recorded.[/dim]",
                title=f"[bold red]{escape(str(key))}[/bold red]",
                border_style="red"
            ))

    def render_summary(self, context: ValidationContext):
        summary = context.summary or Summary()
        verdict = "[green]ALL OK[/green]" if context.all_ok else "[red]NOK OBJECTS FOUND[/red]"
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]  {verdict}\n"
            f"════════════════════════════════════════\n"
            f"Objects:          {summary.total_objects} "
            f"([green]{summary.ok_objects} OK[/green] / [red]{summary.nok_objects} NOK[/red])\n"
            f"Fields:           {summary.total_fields}\n"
            f"Matches:          [green]{summary.total_matches}[/green]\n"
            f"Differences:      [yellow]{summary.total_differences}[/yellow]\n"
            f"Ignored:          [dim]{summary.total_ignored}[/dim]\n"
            f"Missing / Extra:  [red]{summary.total_missing}[/red] / [magenta]{summary.total_extra}[/magenta]\n"
            f"Field Match Rate: {summary.field_match_rate:.1f}%\n"
            f"Object Match Rate: {summary.object_match_rate:.1f}%\n"
            f"Execution Time:   {context.execution_time_ms} ms",
            subtitle=escape(context.description) or None,
            border_style="dim"
        ))

    def render_flat(self, objects: Iterable[FlatObject]):
        for obj in objects:
            table = Table(title=f"{obj.kind}/{obj.name}", show_header=True, header_style="bold magenta")
            table.add_column("Path", style="cyan")
            table.add_column("Value", style="white")
            for path in sorted(obj.fields):
                table.add_row(escape(path), escape(obj.fields[path]))
            self.console.print(table)

    def render_rules(self, rules: Iterable[IgnoreRule]):
        table = Table(title="Ignore Rules", show_header=True, header_style="bold magenta")
        table.add_column("Path", style="cyan")
        table.add_column("Origin")
        table.add_column("Resource Type", style="dim")
        for rule in rules:
            origin = "[dim]default[/dim]" if rule.is_default else "[green]custom[/green]"
            table.add_row(escape(rule.path), origin, rule.resource_type or "*")
        self.console.print(table)
