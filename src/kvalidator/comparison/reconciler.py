#!/usr/bin/env python3
"""
KVALIDATOR OBJECT RECONCILER
----------------------------
Folds field-level comparison records into one status per
(object, namespace) and one overall OK/NOK verdict per object.

Rules:
  * only units whose left side is the designated baseline are used
  * a one-sided object (MISSING / EXTRA) short-circuits its field records
  * ignored fields never make an object DIFFERENT
  * the baseline column is reference only and never fails an object

Author: KValidator Team
Date: 2026-10-17
"""

import logging
from typing import Iterable, Iterator, List, Optional, Sequence

from kvalidator.core.errors import BaselineError
from kvalidator.core.models import (
    ComparisonUnit,
    FieldComparisonRecord,
    FieldStatus,
    NamespaceStatus,
    ObjectComparison,
    ObjectPresence,
    ObjectResult,
    ObjectStatus,
    OverallStatus,
    ReconciliationResult,
)
from kvalidator.rules.ignore import IgnoreRuleSet

logger = logging.getLogger("kvalidator.reconciler")


def check_units(units: Sequence[ComparisonUnit]) -> None:
    """Caller contract: a list of ComparisonUnits. Anything else fails fast."""
    if not isinstance(units, (list, tuple)):
        raise TypeError(f"Expected a list of comparison units, got {type(units).__name__}")
    for unit in units:
        if not isinstance(unit, ComparisonUnit):
            raise TypeError(f"Expected ComparisonUnit, got {type(unit).__name__}")


def baseline_units(units: Iterable[ComparisonUnit], baseline_label: str,
                   warn: bool = True) -> Iterator[ComparisonUnit]:
    """Yields the (baseline, target) units; every other pairing is dropped."""
    for unit in units:
        if unit.left_label != baseline_label:
            if warn:
                logger.warning(f"Skipping comparison {unit.left_label} vs {unit.right_label}: "
                               f"left side is not the baseline '{baseline_label}'")
            continue
        if unit.right_label == baseline_label:
            if warn:
                logger.warning(f"Skipping comparison of baseline '{baseline_label}' against itself")
            continue
        yield unit


def valid_objects(unit: ComparisonUnit, warn: bool = True) -> Iterator[ObjectComparison]:
    for obj in unit.objects.values():
        if not obj.object_id:
            if warn:
                logger.warning(f"Skipping object without objectId in {unit.left_label} vs {unit.right_label}")
            continue
        yield obj


def valid_records(obj: ObjectComparison, warn: bool = True) -> Iterator[FieldComparisonRecord]:
    for record in obj.records:
        if not record.object_id or not record.field_path:
            if warn:
                logger.warning(f"Skipping incomplete record of {obj.kind}/{obj.object_id}: {record!r}")
            continue
        yield record


def describe(record: FieldComparisonRecord) -> str:
    if record.status is FieldStatus.ONLY_IN_LEFT:
        return f"Missing: {record.field_path}"
    if record.status is FieldStatus.ONLY_IN_RIGHT:
        return f"Extra: {record.field_path}"
    return f"{record.field_path}: {record.left_value} → {record.right_value}"


class ObjectReconciler:
    """
    Builds the object x namespace status matrix. Holds no per-run state,
    so separate runs may reconcile concurrently.
    """

    def __init__(self, rules: Optional[IgnoreRuleSet] = None):
        self.rules = rules if rules is not None else IgnoreRuleSet()

    def reconcile(self, units: List[ComparisonUnit], baseline_label: str) -> ReconciliationResult:
        check_units(units)
        if not baseline_label:
            raise BaselineError("A baseline label is required for reconciliation")

        result = ReconciliationResult(baseline_label=baseline_label)

        for unit in baseline_units(units, baseline_label):
            if unit.right_label not in result.target_labels:
                result.target_labels.append(unit.right_label)

            for obj in valid_objects(unit):
                entry = result.objects.setdefault(obj.key, ObjectResult(key=obj.key))
                entry.statuses[unit.right_label] = self.object_status(obj, unit.right_label)
                if obj.resolved_presence() is not ObjectPresence.RIGHT_ONLY:
                    entry.exists_in_baseline = True

        for entry in result.objects.values():
            self._finalize(entry, baseline_label)

        logger.info(f"Reconciled {len(result.objects)} objects across "
                    f"{len(result.target_labels)} target namespaces (baseline: {baseline_label})")
        return result

    def object_status(self, obj: ObjectComparison, target_label: str) -> ObjectStatus:
        """Status of one object in one target namespace."""
        presence = obj.resolved_presence()
        if presence is ObjectPresence.LEFT_ONLY:
            return ObjectStatus(NamespaceStatus.MISSING, 0,
                                [f"Object missing in {target_label}"], list(obj.records))
        if presence is ObjectPresence.RIGHT_ONLY:
            return ObjectStatus(NamespaceStatus.EXTRA, 0,
                                [f"Object only exists in {target_label}"], list(obj.records))

        details = []
        records = list(valid_records(obj))
        for record in records:
            if record.status is FieldStatus.MATCH:
                continue
            if self.rules.is_ignored(record.field_path, obj.kind):
                continue
            details.append(describe(record))

        status = NamespaceStatus.DIFFERENT if details else NamespaceStatus.IDENTICAL
        return ObjectStatus(status, len(details), details, records)

    def _finalize(self, entry: ObjectResult, baseline_label: str) -> None:
        """Puts the baseline column first and derives the overall status."""
        if entry.exists_in_baseline:
            baseline = ObjectStatus(NamespaceStatus.BASELINE)
        else:
            baseline = ObjectStatus(NamespaceStatus.MISSING, 0,
                                    [f"Object not defined in {baseline_label}"])

        targets = entry.statuses
        entry.statuses = {baseline_label: baseline}
        entry.statuses.update(targets)

        entry.overall = OverallStatus.OK
        for status in targets.values():
            if status.status is not NamespaceStatus.IDENTICAL:
                entry.overall = OverallStatus.NOK
                break
