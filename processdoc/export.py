"""File naming and on-disk export of generated process documents."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .confirm import ProcessDocuments

logger = logging.getLogger(__name__)


def sanitize_title(title: str) -> str:
    """Convert a process title to a safe file name stem."""
    name = re.sub(r'\s+', '-', (title or '').lower())
    name = re.sub(r'[\\/:*?"<>|]', '', name)
    name = re.sub(r'-+', '-', name).strip('-')
    return name or 'process'


def write_documents(documents: ProcessDocuments, out_dir: str | Path) -> list[Path]:
    """Write ``<title>.bpmn`` and, when present, ``<title>.md`` into ``out_dir``."""
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    stem = sanitize_title(documents.title)

    written = []
    bpmn_path = out / f'{stem}.bpmn'
    bpmn_path.write_text(documents.bpmn_xml, encoding='utf-8')
    written.append(bpmn_path)

    if documents.markdown:
        md_path = out / f'{stem}.md'
        md_path.write_text(documents.markdown, encoding='utf-8')
        written.append(md_path)

    logger.info("Exported %s", ', '.join(str(p) for p in written))
    return written
