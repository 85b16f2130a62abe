#!/usr/bin/env python3
"""
KVALIDATOR ENGINE - The Orchestrator
------------------------------------
The ValidationEngine runs a validation from paths or payloads:

  1. load the config and build the ignore rule set
  2. collect and flatten the baseline and target manifests
  3. compare, reconcile and summarize through the ComparisonPipeline

Author: KValidator Team
Date: 2026-10-17
"""

import time
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from kvalidator.collector.flattener import DEFAULT_SECTIONS, PathFlattener
from kvalidator.collector.loader import ManifestLoader
from kvalidator.comparison.context import ValidationContext
from kvalidator.comparison.payload import parse_units, payload_baseline
from kvalidator.comparison.pipeline import ComparisonPipeline
from kvalidator.config.validation_config import ConfigLoader, ValidationConfig
from kvalidator.core.errors import BaselineError
from kvalidator.core.models import FlatObject, NamespaceSnapshot

logger = logging.getLogger("kvalidator.engine")

PathLike = Union[str, Path]


class ValidationEngine:
    """
    Principal orchestrator for baseline validation runs.
    Owns the rule set, the manifest loader and the comparison pipeline.
    """

    def __init__(self, config_path: Optional[PathLike] = None,
                 extra_ignores: Optional[List[str]] = None,
                 include_defaults: bool = True,
                 sections: Iterable[str] = DEFAULT_SECTIONS,
                 config: Optional[ValidationConfig] = None):
        self.config = config if config is not None else ConfigLoader().load(config_path)
        self.rules = self.config.rule_set(include_defaults=include_defaults, extra=extra_ignores)
        if self.config.paths:
            logger.debug(f"Config ignore paths: {', '.join(self.config.paths)}")
        self.loader = ManifestLoader(PathFlattener(sections))
        self.pipeline = ComparisonPipeline(self.rules)
        logger.debug(f"Engine ready with {len(self.rules)} ignore rules "
                     f"({len(self.rules.custom)} custom)")

    def collect(self, path: PathLike, label: Optional[str] = None,
                kinds: Optional[Sequence[str]] = None) -> NamespaceSnapshot:
        snapshot = self.loader.collect(Path(path), label=label, kinds=kinds)
        if not len(snapshot):
            logger.warning(f"No objects collected for {snapshot.label}; every baseline object will be MISSING")
        return snapshot

    def validate(self, baseline_path: PathLike, target_paths: Sequence[PathLike],
                 kinds: Optional[Sequence[str]] = None,
                 baseline_label: Optional[str] = None) -> ValidationContext:
        """
        Validates one or more target manifest sets against a baseline.
        Target labels are the path stems; clashing stems get a numeric suffix.
        """
        if not target_paths:
            raise BaselineError("At least one target is required")

        started = time.monotonic()
        baseline = self.collect(baseline_path, label=baseline_label, kinds=kinds)

        taken = {baseline.label}
        targets = []
        for path in target_paths:
            label = self._unique_label(Path(path).stem, taken)
            taken.add(label)
            targets.append(self.collect(path, label=label, kinds=kinds))

        context = self.pipeline.run(baseline, targets)
        context.execution_time_ms = int((time.monotonic() - started) * 1000)
        context.description = f"{baseline.label} vs {', '.join(t.label for t in targets)}"
        logger.info(f"Validation finished in {context.execution_time_ms} ms")
        return context

    def validate_payload(self, payload: Any, baseline_label: Optional[str] = None) -> ValidationContext:
        """Reconciles comparison results produced by an external comparator."""
        units = parse_units(payload)
        baseline = baseline_label or payload_baseline(payload)
        if not baseline:
            raise BaselineError("No baseline namespace given and none designated in the payload")

        started = time.monotonic()
        context = self.pipeline.run_units(units, baseline)
        context.execution_time_ms = int((time.monotonic() - started) * 1000)
        context.description = f"payload reconciled against {baseline}"
        return context

    def flatten_file(self, path: PathLike, kinds: Optional[Sequence[str]] = None) -> List[FlatObject]:
        """Flattens every valid object under `path`."""
        snapshot = self.collect(path, kinds=kinds)
        return list(snapshot.objects.values())

    def generate_summary(self, context: ValidationContext) -> Dict[str, Any]:
        """Compact run summary for logs and the CLI footer."""
        summary = context.summary.to_dict() if context.summary else {}
        summary["baselineNamespace"] = context.baseline_label
        summary["targets"] = list(context.target_labels)
        summary["executionTimeMs"] = context.execution_time_ms
        summary["summaryTimestamp"] = time.strftime("%Y-%m-%d %H:%M:%S")
        return summary

    @staticmethod
    def _unique_label(label: str, taken: Iterable[str]) -> str:
        taken = set(taken)
        candidate, counter = label, 1
        while candidate in taken:
            candidate = f"{label}-{counter}"
            counter += 1
        return candidate
