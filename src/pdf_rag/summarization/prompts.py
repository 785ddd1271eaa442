"""Prompt templates for document summarization."""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

# Keeps a single request within the context window of small local models.
MAX_INPUT_CHARS = 24_000

SUMMARY_SYSTEM = """\
You are a careful technical editor. Summarise the document the user
provides in one or two short paragraphs. State the main topic, the key
findings or claims, and any conclusions. Do not invent details that are
not in the text. Reply with the summary only."""

SUMMARY_HUMAN = """\
Document:
---
{text}
---"""


def build_summary_prompt(text: str, max_chars: int = MAX_INPUT_CHARS) -> list[BaseMessage]:
    """Build the system + user messages asking for a summary of *text*.

    Text longer than *max_chars* is cut and marked as truncated.
    """
    body = text.strip()
    if len(body) > max_chars:
        body = body[:max_chars].rstrip() + "\n[... truncated ...]"
    return [
        SystemMessage(content=SUMMARY_SYSTEM),
        HumanMessage(content=SUMMARY_HUMAN.format(text=body)),
    ]
