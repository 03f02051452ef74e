"""Prompt construction for review-suggestion generation."""

from __future__ import annotations

from review_suggest.models.category import BusinessCategory
from review_suggest.models.request import GenerationRequest

SYSTEM_PROMPT = """\
You write short, authentic Google reviews from the perspective of a satisfied customer.
Always respond with a valid JSON array of strings and nothing else: no markdown, no commentary."""

_TONE_GUIDANCE = {
    "professional": "measured and professional, like a customer writing a considered recommendation",
    "casual": "relaxed and conversational, like a customer telling a friend",
    "enthusiastic": "upbeat and excited, with genuine energy but no exaggeration",
}


def build_prompt(
    request: GenerationRequest,
    category: BusinessCategory,
    unrelated: list[str],
    count: int,
    avoid: list[str] | None = None,
) -> str:
    """Build the user prompt for ``count`` suggestions.

    Args:
        request: The generation request.
        category: Resolved catalog category of the business.
        unrelated: Display names of industries the reviews must not mention.
        count: Number of suggestions to ask for.
        avoid: Suggestions already shown for this business.
    """
    lines = [
        f'Write exactly {count} different Google reviews for "{request.business_name}", '
        f"a {category.name} business.",
        "",
        "Requirements for each review:",
        "- 1 to 3 sentences, between 20 and 400 characters",
        f"- Tone: {_TONE_GUIDANCE[request.tone.value]}",
        f"- Language: {request.language}",
        "- Mention one or two concrete aspects of the visit; vary them between reviews",
        "- Sound like a real customer; no hashtags, emojis, ratings or placeholders",
    ]
    if category.keywords:
        lines.append(f"- Draw on aspects such as: {', '.join(category.keywords)}")
    if unrelated:
        lines.append(
            f"- This is a {category.name} business. Do NOT mention products, services or "
            f"experiences from unrelated industries such as {', '.join(unrelated)}."
        )
    if avoid:
        lines.append("")
        lines.append("Do not repeat or paraphrase these reviews, which were already shown:")
        lines.extend(f"- {text}" for text in avoid)
    lines.append("")
    lines.append(f'Return only a JSON array of {count} strings, e.g. ["review one", "review two"].')
    return "\n".join(lines)
