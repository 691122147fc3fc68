from __future__ import annotations

import logging

from .query_expansion import DEFAULT_TOPIC
from .schema import RetrievalHit

logger = logging.getLogger(__name__)

INSUFFICIENT_CONTEXT_ANSWER = "I don't have enough information in the provided context to answer that."
ANSWER_ERROR_MESSAGE = "I encountered an error while generating your answer. Please try again."


def build_context(hits: list[RetrievalHit]) -> str:
    blocks = []
    for idx, hit in enumerate(hits):
        label = f"[Context {idx + 1}]"
        if hit.query:
            label += f' (Retrieved by: "{hit.query}")'
        blocks.append(f"{label}\n{hit.text}")
    return "\n\n".join(blocks)


def build_answer_prompt(question: str, hits: list[RetrievalHit], topic: str = DEFAULT_TOPIC) -> str:
    return (
        f"You are a knowledgeable assistant helping with questions about {topic}.\n"
        "Use the following context to answer the question accurately and precisely.\n"
        "If the information is not in the context, say you don't have enough information to answer.\n\n"
        f"CONTEXT:\n{build_context(hits)}\n\n"
        f"QUESTION:\n{question}\n\n"
        "ANSWER:\n"
    )


def answer_with_context(
    question: str,
    hits: list[RetrievalHit],
    generator,
    topic: str = DEFAULT_TOPIC,
) -> str:
    """Answer a question using only the retrieved hits as context.

    Returns a fixed insufficient-information reply without calling the
    service when there is no context, and a fixed apology if the call fails.
    """
    if not hits:
        return INSUFFICIENT_CONTEXT_ANSWER

    try:
        return generator.generate(build_answer_prompt(question, hits, topic))
    except Exception as exc:  # noqa: BLE001
        logger.error("Error generating answer: %s", exc)
        return ANSWER_ERROR_MESSAGE
