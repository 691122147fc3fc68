from __future__ import annotations

from openai import OpenAI


def generate_text(prompt: str, model: str = "gpt-4.1-mini", client: OpenAI | None = None) -> str:
    """Send a single prompt to the Responses API and return the output text."""
    client = client or OpenAI()
    response = client.responses.create(model=model, input=prompt)
    return response.output_text


class OpenAIGenerator:
    """Generative-text service handle used for paraphrasing and answering."""

    def __init__(self, client: OpenAI | None = None, model: str = "gpt-4.1-mini"):
        self.client = client or OpenAI()
        self.model = model

    def generate(self, prompt: str) -> str:
        return generate_text(prompt, model=self.model, client=self.client)
