"""
Summarization — LLM-generated summaries of extracted documents.

Public API
----------
- :func:`summarize` — summarise one text with any LangChain chat model.
- :func:`get_llm` — build the configured chat model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pdf_rag.summarization.prompts import build_summary_prompt

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

__all__ = ["build_summary_prompt", "get_llm", "summarize"]


def summarize(llm: BaseChatModel, text: str) -> str:
    """Return the model's summary of *text*."""
    if not text.strip():
        raise ValueError("Cannot summarise an empty document")
    response = llm.invoke(build_summary_prompt(text))
    content = response.content
    if isinstance(content, list):
        content = "".join(part if isinstance(part, str) else part.get("text", "") for part in content)
    return content.strip()


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import get_llm to avoid pulling in langchain_openai at import time."""
    if name == "get_llm":
        from pdf_rag.summarization.llm import get_llm

        return get_llm
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
