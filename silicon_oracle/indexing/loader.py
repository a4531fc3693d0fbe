"""
Lore loader: read JSON lore files from the lore directory.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Tuple

from silicon_oracle.config import settings
from silicon_oracle.exceptions import LoreSourceError

LORE_DIR = settings.lore_dir

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoreDocument:
    name: str
    content: Any


def load_lore_documents(lore_dir: str | Path = LORE_DIR) -> Tuple[List[LoreDocument], int]:
    """
    Load every ``*.json`` file of ``lore_dir`` in name order.

    Returns the parsed documents and the number of files skipped because
    they could not be read or parsed. Raises ``LoreSourceError`` when the
    directory itself is unavailable.
    """
    base = Path(lore_dir)
    try:
        paths = sorted(path for path in base.iterdir() if path.suffix == ".json" and path.is_file())
    except OSError as exc:
        raise LoreSourceError(f"Cannot read lore directory {base}: {exc}", details={"lore_dir": str(base)}) from exc

    documents: List[LoreDocument] = []
    skipped = 0
    for path in paths:
        try:
            content = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            skipped += 1
            logger.warning("Skipping unreadable lore file", extra={"file": path.name, "error": str(exc)})
            continue
        documents.append(LoreDocument(name=path.stem, content=content))

    logger.info("Loaded lore files", extra={"documents": len(documents), "skipped": skipped, "lore_dir": str(base)})
    return documents, skipped


__all__ = ["LoreDocument", "load_lore_documents", "LORE_DIR"]
