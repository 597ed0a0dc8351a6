"""Prompt text shared by the LLM providers."""

__all__ = [
    "REPLY_SYSTEM_PROMPT",
    "LLM_REPLY_CONFIDENCE",
]

REPLY_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates professional, friendly, and concise "
    "email replies for property hosts responding to guest inquiries. "
    "Keep replies warm, helpful, and action-oriented."
)

# Fixed score reported for any non-empty LLM draft
LLM_REPLY_CONFIDENCE = 0.85
