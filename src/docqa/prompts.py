from __future__ import annotations

from typing import List, Sequence

from docqa.models import RetrievedChunk


SYSTEM_PROMPT = """You are a helpful assistant answering questions about a private document collection.
Use the provided context when it is relevant. If the context does not contain the answer,
say so plainly instead of guessing.
"""

NO_CONTEXT = "No relevant context was found in the document collection."


def _format_chunk(n: int, chunk: RetrievedChunk) -> str:
    label = chunk.title or chunk.source
    return f"[{n}] ({label})\n{chunk.text.strip()}"


def select_context(chunks: Sequence[RetrievedChunk], max_context_chars: int = 12000) -> List[str]:
    """
    Format retrieved chunks in rank order until max_context_chars is reached.
    Chunks past the cap are dropped whole; a single oversized first chunk is truncated.
    """
    blocks: List[str] = []
    used = 0

    for n, chunk in enumerate(chunks, start=1):
        block = _format_chunk(n, chunk)
        if used + len(block) > max_context_chars:
            if not blocks:
                blocks.append(block[:max_context_chars])
            break
        blocks.append(block)
        used += len(block) + 2  # blank line between blocks

    return blocks


def build_augmented_prompt(
    question: str,
    chunks: Sequence[RetrievedChunk],
    max_context_chars: int = 12000,
) -> str:
    """
    Append retrieved document text to the user's question.
    """
    blocks = select_context(chunks, max_context_chars)
    context = "\n\n".join(blocks) if blocks else NO_CONTEXT

    return f"""
Context from the document collection:

{context}

Question:
{question.strip()}
""".strip()
