#!/usr/bin/env python3
"""
KVALIDATOR CLI - Baseline Validation
------------------------------------
Command line front-end: compares manifest sets against a baseline,
reconciles external comparison payloads, flattens manifests and manages
the custom ignore rules stored in validation-config.yaml.

Exit codes: 0 all objects OK, 1 NOK objects found (or interrupted),
2 usage or input errors.

Author: KValidator Team
Date: 2026-10-17
"""

import sys
import json
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from kvalidator.cli.formatter import KValidatorFormatter
from kvalidator.config.validation_config import ConfigLoader, ValidationConfig
from kvalidator.core.engine import ValidationEngine
from kvalidator.core.errors import KValidatorError
from kvalidator.report.exporter import ReportExporter, flat_object_to_dict

VERSION = "1.0.0"

EXIT_OK = 0
EXIT_NOK = 1
EXIT_ERROR = 2

# Global console for consistent styling across the application
console = Console()

logger = logging.getLogger("kvalidator.cli")


def setup_logging(verbose: bool = False):
    """Routes library logs through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _split_kinds(values: Optional[List[str]]) -> Optional[List[str]]:
    """`-k Deployment,Service -k ConfigMap` -> ['Deployment', 'Service', 'ConfigMap']"""
    if not values:
        return None
    kinds = [k.strip() for value in values for k in value.split(",") if k.strip()]
    return kinds or None


class KValidatorCLI:
    """
    CLI wrapper that translates user commands into engine actions.
    """

    def __init__(self, console: Console = console):
        self.console = console
        self.formatter = KValidatorFormatter(console)
        self.parser = argparse.ArgumentParser(
            prog="kvalidator",
            description="KValidator - Kubernetes baseline validation across namespaces",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("--version", action="version", version=f"kvalidator v{VERSION}")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        config_parent = argparse.ArgumentParser(add_help=False)
        config_parent.add_argument("-f", "--config", help="Path to validation-config.yaml")

        report_parent = argparse.ArgumentParser(add_help=False)
        report_parent.add_argument("-i", "--ignore", action="append", default=[], metavar="PATH",
                                   help="Extra field path to ignore (repeatable)")
        report_parent.add_argument("-o", "--output", help="Write the report to a .json/.yaml file")
        report_parent.add_argument("--details", action="store_true", help="Show difference details")
        report_parent.add_argument("--no-defaults", action="store_true",
                                   help="Do not apply the built-in ignore rules")

        # 'compare' - manifests vs manifests
        compare_parser = subparsers.add_parser(
            "compare", parents=[config_parent, report_parent],
            help="🔍 Compare target manifests against a baseline")
        compare_parser.add_argument("baseline", help="Baseline YAML file or directory")
        compare_parser.add_argument("targets", nargs="+", help="Target YAML files or directories")
        compare_parser.add_argument("-k", "--kinds", action="append", metavar="KINDS",
                                    help="Only compare these kinds (comma separated, repeatable)")
        compare_parser.add_argument("-b", "--baseline-label", help="Label for the baseline column")

        # 'reconcile' - external comparison payload
        reconcile_parser = subparsers.add_parser(
            "reconcile", parents=[config_parent, report_parent],
            help="🧮 Reconcile a comparison result payload (JSON)")
        reconcile_parser.add_argument("payload", help="Path to the comparison payload")
        reconcile_parser.add_argument("-b", "--baseline", help="Baseline namespace label")

        # 'flatten' - show flat paths
        flatten_parser = subparsers.add_parser("flatten", help="📄 Print flattened manifest paths")
        flatten_parser.add_argument("path", help="YAML file or directory")
        flatten_parser.add_argument("-k", "--kinds", action="append", metavar="KINDS",
                                    help="Only flatten these kinds")
        flatten_parser.add_argument("--json", action="store_true", help="Emit JSON instead of tables")

        # 'rules' - manage ignore rules
        rules_parser = subparsers.add_parser("rules", help="🛡️ Manage ignore rules")
        rules_sub = rules_parser.add_subparsers(dest="action", metavar="Action")
        rules_sub.required = True
        rules_sub.add_parser("list", parents=[config_parent], help="List default and custom rules")
        add_parser = rules_sub.add_parser("add", parents=[config_parent], help="Add a custom rule")
        add_parser.add_argument("path", help="Field path, e.g. metadata.labels.version")
        add_parser.add_argument("--kind", help="Restrict the rule to one resource kind")
        remove_parser = rules_sub.add_parser("remove", parents=[config_parent], help="Remove a custom rule")
        remove_parser.add_argument("path", help="Field path of the rule")
        rules_sub.add_parser("reset", parents=[config_parent], help="Remove every custom rule")
        rules_sub.add_parser("restore", parents=[config_parent], help="Restore the config backup")

    # --- COMMANDS ---

    def _report(self, context, args: argparse.Namespace) -> int:
        self.formatter.render_matrix(context)
        if args.details:
            self.formatter.render_details(context)
        self.formatter.render_summary(context)

        if args.output:
            try:
                path = ReportExporter().export(context, args.output)
            except ValueError as e:
                raise KValidatorError(str(e)) from e
            self.console.print(f"[bold green]Report saved:[/bold green] {path}")

        return EXIT_OK if context.all_ok else EXIT_NOK

    def cmd_compare(self, args: argparse.Namespace) -> int:
        self.formatter.print_header(f"KValidator v{VERSION}", "Baseline Comparison")
        engine = ValidationEngine(config_path=args.config, extra_ignores=args.ignore,
                                  include_defaults=not args.no_defaults)
        with self.console.status("Collecting and comparing manifests..."):
            context = engine.validate(args.baseline, args.targets,
                                      kinds=_split_kinds(args.kinds),
                                      baseline_label=args.baseline_label)
        return self._report(context, args)

    def cmd_reconcile(self, args: argparse.Namespace) -> int:
        self.formatter.print_header(f"KValidator v{VERSION}", "Payload Reconciliation")
        payload_path = Path(args.payload)
        if not payload_path.exists():
            raise FileNotFoundError(f"Payload not found: {payload_path}")
        try:
            payload = json.loads(payload_path.read_text(encoding="utf-8-sig"))
        except ValueError as e:
            raise KValidatorError(f"Invalid JSON payload {payload_path}: {e}") from e

        engine = ValidationEngine(config_path=args.config, extra_ignores=args.ignore,
                                  include_defaults=not args.no_defaults)
        try:
            context = engine.validate_payload(payload, baseline_label=args.baseline)
        except TypeError as e:
            raise KValidatorError(f"Malformed payload {payload_path}: {e}") from e
        return self._report(context, args)

    def cmd_flatten(self, args: argparse.Namespace) -> int:
        engine = ValidationEngine(config=ValidationConfig())
        objects = engine.flatten_file(args.path, kinds=_split_kinds(args.kinds))
        if args.json:
            self.console.print_json(json.dumps([flat_object_to_dict(o) for o in objects]))
        else:
            self.formatter.render_flat(objects)
        return EXIT_OK

    def cmd_rules(self, args: argparse.Namespace) -> int:
        loader = ConfigLoader()
        if args.action == "restore":
            path = loader.restore_backup(args.config)
            self.console.print(f"[bold green]Restored:[/bold green] {path}")
            return EXIT_OK

        config = loader.load(args.config)
        rules = config.rule_set()

        if args.action == "list":
            self.formatter.render_rules(rules)
            self.console.print(f"[dim]{len(rules.defaults)} default, {len(rules.custom)} custom[/dim]")
            return EXIT_OK

        if args.action == "add":
            try:
                added = rules.add(args.path, args.kind)
            except ValueError as e:
                raise KValidatorError(str(e)) from e
            if not added:
                self.console.print(f"[bold yellow]Rule already present:[/bold yellow] {args.path}")
                return EXIT_OK
        elif args.action == "remove":
            if args.path not in rules:
                self.console.print(f"[bold red]Error:[/bold red] No ignore rule for '{escape(args.path)}'")
                return EXIT_ERROR
            rules.remove(args.path)
        elif args.action == "reset":
            rules.reset()

        updated = ValidationConfig.from_rule_set(rules, config.source)
        if args.action != "reset":
            updated.ignore_fields[:0] = config.shadowed()
        path = loader.save(updated, args.config)
        self.console.print(f"[bold green]Saved {len(rules.custom)} custom rules to[/bold green] {path}")
        return EXIT_OK

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point. Returns the process exit code."""
        argv = sys.argv[1:] if argv is None else argv
        if not argv:
            self.formatter.print_header(f"KValidator v{VERSION}", "Kubernetes Baseline Validation")
            self.parser.print_help()
            return EXIT_OK

        args = self.parser.parse_args(argv)
        setup_logging(args.verbose)

        handlers = {
            "compare": self.cmd_compare,
            "reconcile": self.cmd_reconcile,
            "flatten": self.cmd_flatten,
            "rules": self.cmd_rules,
        }
        handler = handlers.get(args.command)
        if handler is None:
            self.parser.print_help()
            return EXIT_ERROR

        try:
            return handler(args)
        except (KValidatorError, FileNotFoundError) as e:
            logger.debug("Command failed", exc_info=True)
            self.console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            return EXIT_ERROR


def main(argv: Optional[List[str]] = None):
    """Application entry point with interrupt handling."""
    try:
        sys.exit(KValidatorCLI().run(argv))
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
