#!/usr/bin/env python3
"""
KVALIDATOR SUMMARY AGGREGATOR
-----------------------------
Rolls reconciled results up into the global counters written to reports.

An object only counts as matched when every one of its fields either
matches or is ignored, in every target namespace. One unignored
difference disqualifies the whole object.

Author: KValidator Team
Date: 2026-10-17
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from kvalidator.core.models import (
    ComparisonUnit,
    FieldStatus,
    ObjectKey,
    ObjectPresence,
    OverallStatus,
    ReconciliationResult,
    Summary,
)
from kvalidator.comparison.reconciler import baseline_units, check_units, valid_objects, valid_records
from kvalidator.rules.ignore import IgnoreRuleSet

logger = logging.getLogger("kvalidator.summary")


def rate(numerator: int, denominator: int) -> float:
    """Percentage rounded to one decimal; 0.0 for an empty denominator."""
    if denominator <= 0:
        return 0.0
    return round(numerator * 100.0 / denominator, 1)


@dataclass
class _ObjectTally:
    total: int = 0
    matched: int = 0
    ignored: int = 0

    @property
    def fully_matched(self) -> bool:
        return self.matched + self.ignored == self.total


class SummaryAggregator:

    def __init__(self, rules: Optional[IgnoreRuleSet] = None):
        self.rules = rules if rules is not None else IgnoreRuleSet()

    def summarize(self, result: ReconciliationResult, units: List[ComparisonUnit]) -> Summary:
        check_units(units)

        fields = matches = ignored = differences = missing = extra = 0
        tallies: Dict[ObjectKey, _ObjectTally] = {key: _ObjectTally() for key in result.objects}

        # The reconciler already logged the records it skipped
        for unit in baseline_units(units, result.baseline_label, warn=False):
            for obj in valid_objects(unit, warn=False):
                tally = tallies.setdefault(obj.key, _ObjectTally())
                presence = obj.resolved_presence()

                if presence is not ObjectPresence.BOTH:
                    fields += 1
                    tally.total += 1
                    if presence is ObjectPresence.LEFT_ONLY:
                        missing += 1
                    else:
                        extra += 1
                    continue

                for record in valid_records(obj, warn=False):
                    fields += 1
                    tally.total += 1
                    if self.rules.is_ignored(record.field_path, obj.kind):
                        ignored += 1
                        tally.ignored += 1
                    elif record.status is FieldStatus.MATCH:
                        matches += 1
                        tally.matched += 1
                    else:
                        differences += 1

        matched_objects = sum(1 for t in tallies.values() if t.fully_matched)
        overall = [r.overall for r in result.objects.values()]

        summary = Summary(
            total_objects=len(tallies),
            total_fields=fields,
            total_matches=matches,
            total_ignored=ignored,
            total_differences=differences,
            total_missing=missing,
            total_extra=extra,
            matched_objects=matched_objects,
            ok_objects=overall.count(OverallStatus.OK),
            nok_objects=overall.count(OverallStatus.NOK),
            field_match_rate=rate(matches, fields - ignored),
            object_match_rate=rate(matched_objects, len(tallies)),
        )
        logger.debug(f"Summary: {summary}")
        return summary
