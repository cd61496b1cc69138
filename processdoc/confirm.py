"""Summary confirmation: compile the narrative and the BPMN diagram.

Markdown generation may fail softly (deterministic fallback). BPMN synthesis
may not: any exception aborts the confirmation with a fixed user-facing
message, and the caller keeps the interview state untouched for a retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .bpmn_generator import generate_bpmn_xml
from .llm_client import LLMClient, is_transient
from .markdown import generate_fallback_markdown, generate_process_markdown
from .retry import retry
from .schemas import ProcessSummary

logger = logging.getLogger(__name__)

BPMN_FAILURE_MESSAGE = "BPMN generation failed. The interview has been preserved for review."


class ProcessGenerationError(RuntimeError):
    """Document generation failed; ``user_message`` is safe to show."""

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


@dataclass(frozen=True)
class ProcessDocuments:
    title: str
    markdown: str
    bpmn_xml: str


async def confirm_summary(
    summary: ProcessSummary,
    llm: Optional[LLMClient] = None,
    language: str = "en",
    title: Optional[str] = None,
    max_attempts: int = 3,
    retry_delay: float = 5.0,
) -> ProcessDocuments:
    """Generate Markdown + BPMN for a confirmed summary."""
    markdown = await _markdown_or_fallback(summary, llm, language, max_attempts, retry_delay)

    # Deterministic: no retry.
    try:
        bpmn_xml = generate_bpmn_xml(summary)
    except Exception as exc:
        logger.error("[Confirm] BPMN generation failed for %r: %s", summary.process_name, exc)
        raise ProcessGenerationError(BPMN_FAILURE_MESSAGE) from exc

    logger.info(
        "[Confirm] Generated documents for %r (%d steps, %d chars markdown)",
        summary.process_name, len(summary.steps), len(markdown),
    )
    return ProcessDocuments(
        title=title or summary.process_name,
        markdown=markdown,
        bpmn_xml=bpmn_xml,
    )


async def _markdown_or_fallback(
    summary: ProcessSummary,
    llm: Optional[LLMClient],
    language: str,
    max_attempts: int,
    retry_delay: float,
) -> str:
    if llm is None:
        logger.info("[Confirm] No LLM configured, using fallback markdown")
        return generate_fallback_markdown(summary)

    try:
        return await retry(
            lambda: generate_process_markdown(llm, summary, language),
            max_attempts=max_attempts,
            delay=retry_delay,
            retry_if=is_transient,
        )
    except Exception as exc:
        logger.error("[Confirm] Markdown generation failed: %s", exc)
        return generate_fallback_markdown(summary)
