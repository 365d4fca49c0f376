"""Identifier helpers for source documents and their postings."""

import uuid


def new_document_id() -> str:
    """Return a fresh source document ID."""
    return uuid.uuid4().hex


def posting_key(source_id: str, suffix: str) -> str:
    """Return the deterministic key of a posting owned by a source document.

    Re-deriving a document's postings finds exactly the rows it produced by
    these keys, never by matching amounts or dates.
    """
    return f"{source_id}-{suffix}"
