"""JSON file sink for the public datasets artifact."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from errors import SerializationError
from models import OutputDocument

LOGGER = logging.getLogger(__name__)

DATASET_NAMES = (
    "per_lista_ids",
    "distribuzione_atenei",
    "distribuzione_corsi",
    "distribuzione_anno_nascita",
)


def write_output_document(document: OutputDocument, output_path: str) -> Path:
    """Replace the artifact at ``output_path`` with ``document``.

    The JSON is written to a temporary file in the target directory and moved
    into place with os.replace, so readers see either the previous artifact or
    the complete new one.
    """
    path = Path(output_path)
    payload = json.dumps(document.to_dict(), indent=2, ensure_ascii=False)

    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as fh:
            tmp_name = fh.name
            fh.write(payload)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except (OSError, ValueError) as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise SerializationError(f"Could not write {path}: {exc}") from exc

    LOGGER.info("Wrote %s (%s contacts)", path, document.total_contacts)
    return path


def validate_output_document(data: Any) -> bool:
    """Basic schema validation for consumers of the artifact."""
    if not isinstance(data, dict):
        return False
    if not isinstance(data.get("generatedAt"), str):
        return False

    totals = data.get("totals")
    if not isinstance(totals, dict) or not isinstance(totals.get("contacts"), int):
        return False

    datasets = data.get("datasets")
    if not isinstance(datasets, dict):
        return False
    for name in DATASET_NAMES:
        items = datasets.get(name)
        if not isinstance(items, list):
            return False
        for item in items:
            if not isinstance(item, dict):
                return False
            if not isinstance(item.get("label"), str) or not isinstance(item.get("count"), int):
                return False

    return True
