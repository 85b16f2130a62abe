#!/usr/bin/env python3
"""
KVALIDATOR COMPARISON PIPELINE
------------------------------
Runs the comparison phases in a fixed order:

  1. pairwise field comparison (baseline vs each target)
  2. reconciliation into the object x namespace status matrix
  3. summary aggregation

It can also start at phase 2 with units produced by an external
comparator.

Author: KValidator Team
Date: 2026-10-17
"""

import time
import logging
from typing import List, Optional, Sequence

from kvalidator.comparison.comparator import FieldComparator
from kvalidator.comparison.context import ValidationContext
from kvalidator.comparison.reconciler import ObjectReconciler
from kvalidator.comparison.summary import SummaryAggregator
from kvalidator.core.models import ComparisonUnit, NamespaceSnapshot
from kvalidator.rules.ignore import IgnoreRuleSet

logger = logging.getLogger("kvalidator.pipeline")


class ComparisonPipeline:
    """
    Orchestrates comparator, reconciler and aggregator over one rule set.
    """

    def __init__(self, rules: Optional[IgnoreRuleSet] = None):
        self.rules = rules if rules is not None else IgnoreRuleSet()
        self.comparator = FieldComparator()
        self.reconciler = ObjectReconciler(self.rules)
        self.aggregator = SummaryAggregator(self.rules)

    def run(self, baseline: NamespaceSnapshot,
            targets: Sequence[NamespaceSnapshot]) -> ValidationContext:
        """Compares a baseline snapshot against every target snapshot."""
        started = time.monotonic()

        # --- PHASE 1: FIELD COMPARISON ---
        units = []
        for target in targets:
            if target.label == baseline.label:
                logger.warning(f"Target label '{target.label}' equals the baseline label; skipping")
                continue
            units.append(self.comparator.compare(baseline, target))

        context = self.run_units(units, baseline.label)
        context.execution_time_ms = int((time.monotonic() - started) * 1000)
        return context

    def run_units(self, units: List[ComparisonUnit], baseline_label: str) -> ValidationContext:
        """Reconciles and summarizes already-compared units."""
        started = time.monotonic()

        # --- PHASE 2: RECONCILIATION ---
        result = self.reconciler.reconcile(units, baseline_label)

        # --- PHASE 3: SUMMARY ---
        summary = self.aggregator.summarize(result, units)

        return ValidationContext(
            baseline_label=baseline_label,
            target_labels=list(result.target_labels),
            units=list(units),
            result=result,
            summary=summary,
            execution_time_ms=int((time.monotonic() - started) * 1000),
        )
