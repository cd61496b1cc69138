"""Shared fixtures for document compiler tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from processdoc.config import AppConfig, HttpConfig, LLMConfig
from processdoc.schemas import ProcessSummary


@pytest.fixture
def simple_summary() -> ProcessSummary:
    return ProcessSummary.from_dict({
        "processName": "Simple Process",
        "steps": [
            {"id": "step-1", "name": "Do Task", "description": "A simple task", "type": "task"},
        ],
    })


@pytest.fixture
def decision_summary() -> ProcessSummary:
    return ProcessSummary.from_dict({
        "processName": "Decision Process",
        "steps": [
            {
                "id": "step-1",
                "name": "Review Request",
                "description": "Review the incoming request",
                "type": "task",
            },
            {
                "id": "step-2",
                "name": "Approve?",
                "description": "Decision: approve or reject",
                "type": "decision",
                "conditions": [
                    {"condition": "Approved", "nextStep": "step-3"},
                    {"condition": "Rejected", "nextStep": "end"},
                ],
            },
            {
                "id": "step-3",
                "name": "Process Approved",
                "description": "Handle approved request",
                "type": "task",
            },
        ],
    })


@pytest.fixture
def full_summary_dict() -> dict:
    return {
        "processName": "Invoice Approval",
        "description": "Incoming supplier invoices are checked and paid.",
        "trigger": {"description": "Invoice arrives by e-mail", "type": "event"},
        "steps": [
            {
                "id": "s1",
                "name": "Register invoice",
                "description": "Enter the invoice into the ERP.",
                "type": "task",
                "actor": "Accountant",
                "system": "SAP",
                "nextSteps": ["s2"],
            },
            {
                "id": "s2",
                "name": "Amount above 10k?",
                "description": "Large invoices need sign-off.",
                "type": "decision",
                "conditions": [
                    {"condition": "Approved", "nextStep": "s3"},
                    {"condition": "Rejected", "nextStep": "end"},
                ],
            },
            {
                "id": "s3",
                "name": "Pay invoice",
                "description": "Release the payment run.",
                "type": "subprocess",
            },
        ],
        "roles": [{"name": "Accountant", "description": "Books invoices"}, {"name": "CFO"}],
        "systems": [{"name": "SAP"}],
        "metrics": [{"name": "Cycle time", "value": "3 days"}],
    }


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        http=HttpConfig(host="127.0.0.1", port=9002, api_token=""),
        llm=LLMConfig(api_key="or-test", model="test/model", max_attempts=1),
    )


@pytest.fixture
def app_config_with_token() -> AppConfig:
    return AppConfig(
        http=HttpConfig(host="127.0.0.1", port=9002, api_token="api-token-123"),
        llm=LLMConfig(api_key="", max_attempts=1),
    )


@pytest.fixture
def mock_llm() -> MagicMock:
    llm = MagicMock()
    llm.generate_text = AsyncMock(return_value="# Generated\n\nNarrative.")
    return llm
