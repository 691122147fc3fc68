from __future__ import annotations

import logging

from .schema import ModelRecord

logger = logging.getLogger(__name__)

RECOMMENDATION_ERROR_MESSAGE = (
    "Sorry, I encountered an error while trying to recommend an AI model. "
    "Please check your API key and try again."
)


def format_model(model: ModelRecord) -> str:
    return (
        f"Model: {model.name}\n"
        f"Provider: {model.provider}\n"
        f"Best for: {model.best_for}\n"
        f"Pricing: {model.pricing}\n"
        f"Limitations: {model.limitations}"
    )


def build_selector_prompt(query: str, models: list[ModelRecord]) -> str:
    model_data = "\n\n".join(format_model(model) for model in models)
    return (
        "You are a knowledgeable AI model selector. Your job is to recommend the best AI model "
        "based on the user's needs.\n\n"
        f"Below is information about various AI models:\n{model_data}\n\n"
        f'User Query: "{query}"\n\n'
        "Based on the user's query, please analyze which AI model would be the best fit.\n\n"
        "In your response, provide:\n"
        "1. The recommended AI model name\n"
        "2. Why this model is the best fit for their needs\n"
        "3. Pricing considerations\n"
        "4. Any limitations or alternatives they should consider\n"
        "5. A brief suggestion on how they might implement their solution\n\n"
        "Format your response in a clear, structured way with headings."
    )


def recommend_model(query: str, models: list[ModelRecord], generator) -> str:
    """Ask the generative-text service to pick a model from the catalog.

    Args:
        query: Free-text description of what the user wants to build.
        models: Candidate models included in the prompt.
        generator: Handle exposing `generate(prompt) -> str`.

    Returns:
        The recommendation text, or a fixed apology if the call fails.
    """
    try:
        return generator.generate(build_selector_prompt(query, models))
    except Exception as exc:  # noqa: BLE001
        logger.error("Error recommending AI model: %s", exc)
        return RECOMMENDATION_ERROR_MESSAGE
