"""Query expansion for multi-query retrieval.

The generative-text service is asked for three paraphrases of the user query,
each with a different framing (technical detail, practical use, concepts).
The original query is always kept as the first variation.

Failure handling:
  - malformed service output -> four deterministic templated variations
  - service call error       -> the original query alone
"""
from __future__ import annotations

import json
import logging
import re

from .schema import ORIGIN_FALLBACK, ORIGIN_GENERATED, ORIGIN_ORIGINAL, QueryVariation

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "the document"
EXPECTED_VARIATIONS = 3

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def build_expansion_prompt(query: str, topic: str = DEFAULT_TOPIC) -> str:
    return (
        f"Generate three different versions of the following query to retrieve relevant "
        f"information about {topic}.\n"
        "Create variations that:\n"
        "1. Focus on technical details and specifications\n"
        "2. Focus on practical use cases and examples\n"
        "3. Focus on conceptual understanding and fundamentals\n"
        "\n"
        f'Original query: "{query}"\n'
        "\n"
        "Format your response as a JSON array with only the query variations. For example:\n"
        '["variation 1", "variation 2", "variation 3"]'
    )


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers wrapped around a model response."""
    return _FENCE_RE.sub("", text).strip()


def parse_variations(text: str) -> list[str]:
    """Parse the service response into exactly three paraphrase strings.

    Raises:
        ValueError: If the text is not a JSON array of three non-empty strings.
    """
    parsed = json.loads(strip_code_fences(text))
    if not isinstance(parsed, list) or len(parsed) != EXPECTED_VARIATIONS:
        raise ValueError(f"Expected a JSON array of {EXPECTED_VARIATIONS} strings, got: {parsed!r}")
    if not all(isinstance(item, str) and item.strip() for item in parsed):
        raise ValueError(f"Every variation must be a non-empty string, got: {parsed!r}")
    return [item.strip() for item in parsed]


def fallback_variations(query: str, topic: str = DEFAULT_TOPIC) -> list[QueryVariation]:
    return [
        QueryVariation(text=query, origin=ORIGIN_ORIGINAL),
        QueryVariation(text=f"What are the technical aspects of {query}?", origin=ORIGIN_FALLBACK),
        QueryVariation(text=f"Examples of {query} in {topic}", origin=ORIGIN_FALLBACK),
        QueryVariation(text=f"Explain the concept of {query} in {topic}", origin=ORIGIN_FALLBACK),
    ]


def generate_query_variations(query: str, generator, topic: str = DEFAULT_TOPIC) -> list[QueryVariation]:
    """Return the original query followed by its paraphrases.

    Args:
        query: Original user query.
        generator: Handle exposing `generate(prompt) -> str`.
        topic: Subject the paraphrases should stay within.

    Returns:
        Ordered variations; the first is always the original query.
    """
    try:
        response_text = generator.generate(build_expansion_prompt(query, topic))
    except Exception as exc:  # noqa: BLE001
        logger.error("Error generating query variations: %s", exc)
        return [QueryVariation(text=query, origin=ORIGIN_ORIGINAL)]

    try:
        paraphrases = parse_variations(response_text or "")
    except ValueError as exc:  # json.JSONDecodeError is a ValueError
        logger.warning("Error parsing query variations, using templates: %s", exc)
        return fallback_variations(query, topic)

    return [QueryVariation(text=query, origin=ORIGIN_ORIGINAL)] + [
        QueryVariation(text=text, origin=ORIGIN_GENERATED) for text in paraphrases
    ]
