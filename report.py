"""Read-only view of the published datasets artifact.

Follows the same contract as the dashboard page:

  - a missing artifact is a loading state, not an error;
  - an unreadable or malformed artifact is a plain error message;
  - the summary shows the total contacts and the top entries of the
    list-membership and institution datasets.

Runnable standalone:
    python report.py [path/to/datasets.json]
"""

from __future__ import annotations

import json
import logging
import os
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from config import DEFAULT_OUTPUT_PATH
from errors import LoadError
from json_sink import validate_output_document

LOGGER = logging.getLogger(__name__)

TOP_N = int(os.getenv("REPORT_TOP_N", "10"))


def load_document(path: str) -> dict[str, Any] | None:
    """Return the parsed artifact, or None when it has not been published yet."""
    source = Path(path)
    if not source.exists():
        LOGGER.info("report: artifact not found yet: %s", source)
        return None

    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"Could not read {source}: {exc}") from exc

    try:
        data = json.loads(text)
    except JSONDecodeError as exc:
        raise LoadError(f"Invalid JSON in {source}: {exc}") from exc

    if not validate_output_document(data):
        raise LoadError(f"Unexpected artifact shape in {source}")
    return data


def render_summary(document: dict[str, Any], top_n: int = TOP_N) -> str:
    datasets = document["datasets"]
    lines = [
        f"Updated: {document['generatedAt']}",
        f"Total contacts: {document['totals']['contacts']}",
        "",
        f"Per list (top {top_n})",
    ]
    for rank, item in enumerate(datasets["per_lista_ids"][:top_n], 1):
        lines.append(f"{rank:>3}. List {item['label']}: {item['count']}")

    lines.extend(["", f"Institutions (top {top_n})"])
    for rank, item in enumerate(datasets["distribuzione_atenei"][:top_n], 1):
        lines.append(f"{rank:>3}. {item['label']}: {item['count']}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Standalone execution
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import sys

    from dotenv import load_dotenv

    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    target = sys.argv[1] if len(sys.argv) > 1 else os.getenv("OUTPUT_PATH", DEFAULT_OUTPUT_PATH)
    try:
        loaded = load_document(target)
    except LoadError as exc:
        print(f"Error: {exc}")
        sys.exit(1)
    if loaded is None:
        print("Loading… no datasets published yet")
    else:
        print(render_summary(loaded))
