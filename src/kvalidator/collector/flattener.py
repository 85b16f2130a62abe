#!/usr/bin/env python3
"""
KVALIDATOR PATH FLATTENER
-------------------------
Turns one nested manifest into a flat map of dot/bracket paths to string
values:

    spec.template.spec.containers[0].image -> "nginx:1.25"

Only `kind`, `apiVersion` and the configured sections (metadata and spec
by default) are walked. Everything else at the top level, notably
`status`, never reaches the map unless a caller asks for it explicitly.

Author: KValidator Team
Date: 2026-10-17
"""

import logging
import datetime
from typing import Any, Dict, Iterable, Mapping, Optional

from kvalidator.core.models import FlatObject
from kvalidator.validator.validator import ManifestValidator

logger = logging.getLogger("kvalidator.flattener")

DEFAULT_SECTIONS = ("metadata", "spec")
ROOT_SCALARS = ("kind", "apiVersion")


def to_text(value: Any) -> str:
    """
    Uniform scalar -> string conversion. Booleans use the YAML spelling and
    timestamps keep their ISO 8601 form (UTC as `Z`).
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime.datetime):
        text = value.isoformat()
        return text[:-6] + "Z" if text.endswith("+00:00") else text
    if isinstance(value, datetime.date):
        return value.isoformat()
    return str(value)


class PathFlattener:
    """
    Flattens manifests. Stateless apart from the section list, so one
    instance can be shared across documents and threads.
    """

    def __init__(self, sections: Iterable[str] = DEFAULT_SECTIONS):
        self.sections = tuple(sections)
        self.validator = ManifestValidator()

    def flatten(self, document: Any) -> Optional[FlatObject]:
        """
        Returns the FlatObject for a document, or None when the document
        lacks kind or metadata.name.
        """
        valid, reason = self.validator.validate_identity(document)
        if not valid:
            logger.debug(reason)
            return None

        fields: Dict[str, str] = {}
        for root in ROOT_SCALARS:
            if document.get(root) is not None:
                fields[root] = to_text(document[root])

        for section in self.sections:
            self._walk(document.get(section), section, fields)

        metadata = document["metadata"]
        namespace = metadata.get("namespace")
        return FlatObject(
            kind=to_text(document["kind"]),
            name=to_text(metadata["name"]),
            api_version=to_text(document.get("apiVersion") or ""),
            namespace=to_text(namespace) if namespace is not None else None,
            fields=fields,
        )

    def flatten_value(self, value: Any, prefix: str) -> Dict[str, str]:
        """Flattens an arbitrary subtree under `prefix`."""
        fields: Dict[str, str] = {}
        self._walk(value, prefix, fields)
        return fields

    def _walk(self, value: Any, path: str, out: Dict[str, str]) -> None:
        if value is None:
            return

        if isinstance(value, Mapping):
            for key, child in value.items():
                self._walk(child, f"{path}.{key}" if path else str(key), out)
        elif isinstance(value, (list, tuple)):
            # Positional: reordering a list changes the paths
            for index, item in enumerate(value):
                self._walk(item, f"{path}[{index}]", out)
        else:
            out[path] = to_text(value)


_default_flattener = PathFlattener()


def flatten(document: Any) -> Optional[FlatObject]:
    """Flattens with the default metadata/spec sections."""
    return _default_flattener.flatten(document)
