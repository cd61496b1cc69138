"""Tests for processdoc.export — file names and document export."""

from __future__ import annotations

from pathlib import Path

import pytest

from processdoc.confirm import ProcessDocuments
from processdoc.export import sanitize_title, write_documents


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Invoice Approval", "invoice-approval"),
        ("  Order   to  Cash ", "order-to-cash"),
        ('Process & "Quotes" <Special>', "process-&-quotes-special"),
        ("a/b\\c:d*e?f|g", "abcdefg"),
        ("--Already--dashed--", "already-dashed"),
        ("Rechnungsprüfung", "rechnungsprüfung"),
        ("???", "process"),
        ("", "process"),
    ],
)
def test_sanitize_title(title: str, expected: str) -> None:
    assert sanitize_title(title) == expected


def test_write_documents(tmp_path: Path) -> None:
    docs = ProcessDocuments(title="Invoice Approval", markdown="# Invoice", bpmn_xml="<xml/>")

    written = write_documents(docs, tmp_path / "out")

    assert written == [tmp_path / "out" / "invoice-approval.bpmn", tmp_path / "out" / "invoice-approval.md"]
    assert written[0].read_text(encoding="utf-8") == "<xml/>"
    assert written[1].read_text(encoding="utf-8") == "# Invoice"


def test_write_documents_without_markdown(tmp_path: Path) -> None:
    docs = ProcessDocuments(title="P", markdown="", bpmn_xml="<xml/>")
    assert write_documents(docs, tmp_path) == [tmp_path / "p.bpmn"]
