"""Narrative Markdown document for a confirmed process summary."""

from __future__ import annotations

import json

from .llm_client import LLMClient
from .schemas import ProcessSummary

MARKDOWN_SYSTEM_PROMPT = """Generate a structured Markdown document from the following process summary.
Use these sections: Trigger, Process Steps, Roles/Responsibilities,
Systems Used, Decision Points, Key Metrics.
Use clear headings, bullet points, and tables where appropriate.
Conduct the output in {language}.
IMPORTANT: Only include information present in the summary.
Do not add, infer, or embellish any details."""


def language_name(language: str) -> str:
    return "German" if (language or "").lower() == "de" else "English"


async def generate_process_markdown(
    llm: LLMClient,
    summary: ProcessSummary,
    language: str,
) -> str:
    """Ask the LLM to write the narrative document for ``summary``."""
    system = MARKDOWN_SYSTEM_PROMPT.format(language=language_name(language))
    prompt = "Process Summary:\n" + json.dumps(summary.to_dict(), indent=2, ensure_ascii=False)
    return await llm.generate_text(system, prompt)


def generate_fallback_markdown(summary: ProcessSummary) -> str:
    """Deterministic Markdown used when the LLM is unavailable."""
    lines = [f"# {summary.process_name}"]
    if summary.description:
        lines.append(f"\n{summary.description}")

    if summary.trigger:
        lines.append(f"\n## Trigger\n{summary.trigger.description}")

    if summary.steps:
        lines.append("\n## Process Steps")
        for step in summary.steps:
            lines.append(f"\n### {step.name}")
            lines.append(step.description)
            if step.actor:
                lines.append(f"- **Actor**: {step.actor}")
            if step.system:
                lines.append(f"- **System**: {step.system}")

    if summary.roles:
        lines.append("\n## Roles & Responsibilities")
        for role in summary.roles:
            lines.append(_bullet(role.name, role.description))

    if summary.systems:
        lines.append("\n## Systems Used")
        for system in summary.systems:
            lines.append(_bullet(system.name, system.description))

    if summary.metrics:
        lines.append("\n## Key Metrics")
        for metric in summary.metrics:
            lines.append(_bullet(metric.name, metric.value))

    return "\n".join(lines)


def _bullet(name: str, detail: str | None) -> str:
    return f"- **{name}**: {detail}" if detail else f"- **{name}**"
