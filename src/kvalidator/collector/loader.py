#!/usr/bin/env python3
"""
KVALIDATOR MANIFEST LOADER
--------------------------
Reads baseline/target manifests from YAML files or directories and turns
them into NamespaceSnapshots of flattened objects.

Every document is parsed on its own, so one corrupted document (or one
unreadable file) is logged and skipped while the rest of the batch still
loads.

Author: KValidator Team
Date: 2026-10-17
"""

import re
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Set

from ruamel.yaml import YAML, YAMLError

from kvalidator.collector.flattener import PathFlattener
from kvalidator.core.models import NamespaceSnapshot
from kvalidator.validator.validator import ManifestValidator

logger = logging.getLogger("kvalidator.loader")

YAML_SUFFIXES = (".yaml", ".yml")
DOC_SEPARATOR = re.compile(r"^---[ \t]*(?:#.*)?$", re.MULTILINE)


class ManifestLoader:
    """
    Collects flattened objects from YAML sources.
    """

    def __init__(self, flattener: Optional[PathFlattener] = None):
        self.yaml = YAML(typ="safe")
        self.flattener = flattener or PathFlattener()
        self.validator = ManifestValidator()

    def load_text(self, text: str, source: str = "<string>") -> List[Any]:
        """Parses a (possibly multi-document) YAML string into documents."""
        documents = []
        # Normalize line endings before splitting on separators
        text = text.replace("\r\n", "\n").replace("\r", "\n")

        for index, chunk in enumerate(DOC_SEPARATOR.split(text)):
            if not chunk.strip():
                continue
            try:
                doc = self.yaml.load(chunk)
            except YAMLError as e:
                logger.warning(f"Skipping invalid YAML document #{index} in {source}: {e}")
                continue
            if doc is None:
                continue
            documents.extend(self._expand(doc))

        return documents

    def _expand(self, doc: Any) -> Iterator[Any]:
        """Unwraps `kind: List` documents into their items."""
        if self.validator.is_list(doc):
            logger.debug(f"Processing List with {len(doc['items'])} items")
            yield from doc["items"]
        else:
            yield doc

    def find_files(self, path: Path) -> List[Path]:
        """Returns the YAML files under `path`, sorted, symlinks excluded."""
        if path.is_file():
            return [path]
        return sorted(
            f for f in path.rglob("*")
            if f.is_file() and not f.is_symlink() and f.suffix.lower() in YAML_SUFFIXES
        )

    def load_path(self, path: Path) -> List[Any]:
        """Loads all documents from a file or directory."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Path does not exist: {path}")

        files = self.find_files(path)
        if not files:
            logger.warning(f"No YAML files found in: {path}")

        documents = []
        for file_path in files:
            try:
                # BOM-aware read
                text = file_path.read_text(encoding="utf-8-sig")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Failed to read YAML file: {file_path.name} - {e}")
                continue
            documents.extend(self.load_text(text, source=str(file_path)))

        logger.debug(f"Parsed {len(documents)} documents from {len(files)} files under {path}")
        return documents

    def snapshot(self, documents: Iterable[Any], label: str,
                 kinds: Optional[Iterable[str]] = None) -> NamespaceSnapshot:
        """Flattens documents into a snapshot, dropping malformed ones."""
        wanted: Optional[Set[str]] = set(kinds) if kinds else None
        snapshot = NamespaceSnapshot(label=label)
        dropped = 0

        for doc in documents:
            obj = self.flattener.flatten(doc)
            if obj is None:
                dropped += 1
                continue
            if wanted is not None and obj.kind not in wanted:
                continue
            if snapshot.add(obj):
                logger.warning(f"Duplicate object {obj.key} in {label}; keeping the last definition")

        if dropped:
            logger.info(f"Dropped {dropped} malformed documents from {label}")
        return snapshot

    def collect(self, path: Path, label: Optional[str] = None,
                kinds: Optional[Iterable[str]] = None) -> NamespaceSnapshot:
        """Loads and flattens a manifest file or directory in one step."""
        path = Path(path)
        label = label or path.stem
        logger.info(f"Collecting {label} from path: {path}")
        snapshot = self.snapshot(self.load_path(path), label, kinds=kinds)
        logger.info(f"Collected {len(snapshot)} objects for {label}")
        return snapshot
