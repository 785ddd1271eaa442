"""pdf_rag — cached PDF extraction, summarization and vector indexing."""

__version__ = "0.1.0"
