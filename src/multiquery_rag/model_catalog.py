from __future__ import annotations

import json
from pathlib import Path

from .errors import ConfigurationError
from .schema import ModelRecord

MODEL_CATALOG: tuple[ModelRecord, ...] = (
    # OpenAI
    ModelRecord(
        name="GPT-4o",
        provider="OpenAI",
        best_for="State-of-the-art reasoning, multimodal capabilities, complex instructions, and vision tasks",
        pricing="~$0.01 per 1K tokens input, $0.03 per 1K tokens output",
        limitations="Usage caps may apply, rate limits for API access",
    ),
    ModelRecord(
        name="GPT-4 Turbo",
        provider="OpenAI",
        best_for="Advanced reasoning, complex instructions, creative writing, and nuanced content generation",
        pricing="~$0.01 per 1K tokens input, $0.03 per 1K tokens output",
        limitations="Can be expensive for large-scale use, slightly older than GPT-4o",
    ),
    ModelRecord(
        name="GPT-3.5-Turbo",
        provider="OpenAI",
        best_for="Cost-effective chatbots, content generation, summarization, general applications",
        pricing="~$0.0005 per 1K tokens input, $0.0015 per 1K tokens output",
        limitations="Less capable than GPT-4, occasionally hallucinates",
    ),
    # Anthropic
    ModelRecord(
        name="Claude 3 Opus",
        provider="Anthropic",
        best_for="Enterprise-grade reasoning, long-form content, instruction following with high accuracy",
        pricing="~$0.015 per 1K input tokens, $0.075 per 1K output tokens",
        limitations="Higher latency than some competitors, higher cost",
    ),
    ModelRecord(
        name="Claude 3 Sonnet",
        provider="Anthropic",
        best_for="Balanced performance and cost for general purpose applications, reliable reasoning",
        pricing="~$0.003 per 1K input tokens, $0.015 per 1K output tokens",
        limitations="Less powerful than Opus, but more cost-effective",
    ),
    ModelRecord(
        name="Claude 3 Haiku",
        provider="Anthropic",
        best_for="Fast responses, high throughput applications, embedding in products",
        pricing="~$0.00025 per 1K input tokens, $0.00125 per 1K output tokens",
        limitations="Less capable than larger Claude models, but fastest and most cost-effective",
    ),
    ModelRecord(
        name="Claude 3.7 Sonnet",
        provider="Anthropic",
        best_for="Advanced reasoning, high-quality creative content, complex coding tasks, technical problem solving",
        pricing="~$0.005 per 1K input tokens, $0.025 per 1K output tokens",
        limitations="Higher cost than Haiku for high-volume workloads",
    ),
    # Google
    ModelRecord(
        name="Gemini 1.5 Pro",
        provider="Google",
        best_for="1 million token context window, multimodal tasks, code generation, reasoning",
        pricing="~$0.0007 per 1K input tokens, $0.0014 per 1K output tokens",
        limitations="Performance can vary across specialized tasks",
    ),
    ModelRecord(
        name="Gemini 1.5 Flash",
        provider="Google",
        best_for="Cost-effective, high-throughput applications with good performance",
        pricing="~$0.00035 per 1K input tokens, $0.0007 per 1K output tokens",
        limitations="Less powerful than Pro version, but faster and more cost-effective",
    ),
    ModelRecord(
        name="Gemini 1.0 Ultra",
        provider="Google",
        best_for="Enterprise use cases requiring high accuracy and reliability",
        pricing="Higher tier pricing through enterprise agreements",
        limitations="Being phased out in favor of Gemini 1.5 models",
    ),
    # DeepSeek
    ModelRecord(
        name="DeepSeek Coder",
        provider="DeepSeek",
        best_for="Specialized code generation, understanding, and editing across multiple languages",
        pricing="Free for open-source version, API pricing varies",
        limitations="More specialized for coding than general tasks",
    ),
    ModelRecord(
        name="DeepSeek LLM",
        provider="DeepSeek",
        best_for="General language tasks with strong math and reasoning capabilities",
        pricing="Free for open-source version, API pricing varies",
        limitations="Less widely integrated into tools than competitors",
    ),
    # xAI
    ModelRecord(
        name="Grok-1",
        provider="xAI",
        best_for="Real-time information access, conversational interactions with personality",
        pricing="Available via X (Twitter) Premium subscription",
        limitations="Limited availability, less enterprise integration options",
    ),
    # Image generation
    ModelRecord(
        name="DALL-E 3",
        provider="OpenAI",
        best_for="High-quality image generation from detailed text prompts",
        pricing="~$0.04-0.12 per image depending on size",
        limitations="Limited control over specific elements, no animation capabilities",
    ),
    ModelRecord(
        name="Midjourney v6",
        provider="Midjourney",
        best_for="Artistic, highly aesthetic image generation with style control",
        pricing="Subscription based: $10-60/month",
        limitations="Discord-only interface unless using unofficial APIs, less precise than DALL-E for some instructions",
    ),
    ModelRecord(
        name="Stable Diffusion XL",
        provider="Stability AI",
        best_for="Open-source image generation, local hosting, customization",
        pricing="Free for self-hosting, API usage varies",
        limitations="Requires technical setup for best results, higher resource needs for local deployment",
    ),
    # Video generation
    ModelRecord(
        name="Sora",
        provider="OpenAI",
        best_for="High-quality, longer video generation from text descriptions",
        pricing="Limited access, pricing not publicly available",
        limitations="Very limited availability, currently in research preview",
    ),
    ModelRecord(
        name="Gen-2",
        provider="Runway",
        best_for="Short video generation, image-to-video, and video editing",
        pricing="Subscription based: $15-95/month",
        limitations="Limited video length (typically under 20 seconds), may require visual references",
    ),
    ModelRecord(
        name="Pika 1.0",
        provider="Pika Labs",
        best_for="Accessible video generation with style control and image-to-video capabilities",
        pricing="Freemium model with paid tiers",
        limitations="Shorter video output, less photorealistic than some competitors",
    ),
)


def _record_from_json(record: dict) -> ModelRecord:
    return ModelRecord(
        name=record["name"],
        provider=record["provider"],
        best_for=record.get("best_for", record.get("bestFor", "")),
        pricing=record.get("pricing", ""),
        limitations=record.get("limitations", ""),
    )


def load_model_catalog(path: str | Path | None = None) -> list[ModelRecord]:
    """Return the model catalog, optionally replaced by a JSON file.

    The file must hold `{"models": [...]}` where each entry has `name`,
    `provider`, `bestFor` (or `best_for`), `pricing`, and `limitations`.

    Raises:
        ConfigurationError: If the file is missing, malformed, or empty.
    """
    if path is None:
        return list(MODEL_CATALOG)

    catalog_path = Path(path)
    try:
        payload = json.loads(catalog_path.read_text(encoding="utf-8"))
        models = [_record_from_json(record) for record in payload["models"]]
    except OSError as exc:
        raise ConfigurationError(f"Error loading AI model data from {catalog_path}: {exc}") from exc
    except (ValueError, KeyError, TypeError) as exc:
        raise ConfigurationError(f"Malformed AI model data in {catalog_path}: {exc}") from exc

    if not models:
        raise ConfigurationError(f"No models listed in {catalog_path}")
    return models
