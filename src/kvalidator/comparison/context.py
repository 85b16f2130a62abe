#!/usr/bin/env python3
"""
KVALIDATOR VALIDATION CONTEXT
-----------------------------
State of one validation run: the inputs it compared and everything
derived from them. Created by the ComparisonPipeline and consumed by the
formatter and the exporter.

Author: KValidator Team
Date: 2026-10-17
"""

from dataclasses import dataclass, field
from typing import List, Optional

from kvalidator.core.models import ComparisonUnit, ReconciliationResult, Summary


@dataclass
class ValidationContext:
    """
    Maintains the state of a single validation run.
    """
    baseline_label: str                                    # Designated ground truth
    target_labels: List[str] = field(default_factory=list) # Compared namespaces, in order
    units: List[ComparisonUnit] = field(default_factory=list)
    result: Optional[ReconciliationResult] = None
    summary: Optional[Summary] = None
    execution_time_ms: int = 0
    description: str = ""

    @property
    def all_ok(self) -> bool:
        """True when every reconciled object is OK."""
        return bool(self.summary) and self.summary.nok_objects == 0
