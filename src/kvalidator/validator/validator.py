#!/usr/bin/env python3
"""
KVALIDATOR MANIFEST VALIDATOR - The Gatekeeper
----------------------------------------------
First check every parsed document goes through before it is flattened.
A document that cannot be identified (no kind, no metadata.name) is
reported back to the caller so it can be dropped from the batch instead
of aborting it.

Author: KValidator Team
Date: 2026-10-17
"""

from typing import Any, Mapping, Tuple
import logging

logger = logging.getLogger("kvalidator.validator")


class ManifestValidator:
    """
    Enforces the minimum identity every comparable resource must carry.
    """

    def __init__(self):
        # Identity fields that must exist in every resource we compare
        self.required_fields = ["kind", "metadata"]

    def validate_identity(self, doc: Any) -> Tuple[bool, str]:
        """
        Returns (is_valid, reason). The reason is only meant for logs.
        """
        if not isinstance(doc, Mapping):
            return False, f"Skipping: document is a {type(doc).__name__}, not a mapping."

        # --- TEST 1: Top-level identity fields ---
        for field in self.required_fields:
            if doc.get(field) in (None, ""):
                return False, f"Skipping: missing required top-level field '{field}'."

        # --- TEST 2: metadata.name ---
        metadata = doc.get("metadata")
        if not isinstance(metadata, Mapping):
            return False, "Skipping: 'metadata' must be a map/object."

        name = metadata.get("name")
        if name is None or str(name).strip() == "":
            return False, f"Skipping: {doc.get('kind')} without metadata.name."

        return True, "Manifest carries kind and metadata.name."

    def is_list(self, doc: Any) -> bool:
        """True for a `kind: List` wrapper whose items are separate resources."""
        return (
            isinstance(doc, Mapping)
            and doc.get("kind") == "List"
            and isinstance(doc.get("items"), list)
        )
