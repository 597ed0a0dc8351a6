"""Reply suggestion service for guest_knows.

Drafts a host reply to the latest guest message. An LLM is used when
one is configured; otherwise, or when the LLM call fails, a keyword
template produces a low-confidence placeholder.
"""

from guest_knows.interfaces.llm import LLMInterface
from guest_knows.interfaces.reply import ReplyGeneratorInterface
from guest_knows.logging import get_logger
from guest_knows.models.ingest import PropertyContext, SuggestedReply
from guest_knows.models.knowledge import LatestGuestMessage, NormalizedThread
from guest_knows.services.knowledge_store import KnowledgeStore

__all__ = [
    "ReplySuggestionService",
]

logger = get_logger(__name__)

NO_GUEST_MESSAGE_DRAFT = "Thank you for your message. We'll get back to you soon."
NO_GUEST_MESSAGE_CONFIDENCE = 0.5
TEMPLATE_CONFIDENCE = 0.6

_TEMPLATES = (
    (
        ("check-in", "arrival"),
        "Thank you for reaching out about your check-in. We're looking forward to hosting "
        "you. Please let us know if you have any questions about your stay.",
    ),
    (
        ("check-out", "departure"),
        "Thank you for your message regarding check-out. We hope you enjoyed your stay! "
        "If you need anything before your departure, please don't hesitate to ask.",
    ),
    (
        ("question", "?"),
        "Thank you for your question. We're here to help and will get back to you with "
        "more information shortly.",
    ),
)
_DEFAULT_TEMPLATE = "Thank you for your message. We've received it and will respond soon."


class ReplySuggestionService(ReplyGeneratorInterface):
    """Drafts host replies, preferring the LLM and falling back to templates.

    Example:
        service = ReplySuggestionService(llm=OpenAIProvider(settings), store=store)
        reply = await service.suggest_reply(item.normalized, PropertyContext(property_id="p1"))
    """

    def __init__(
        self,
        llm: LLMInterface | None = None,
        store: KnowledgeStore | None = None,
    ) -> None:
        """Initialize service.

        Args:
            llm: LLM provider; None means template replies only
            store: Knowledge store used to look up property context text
        """
        self._llm = llm
        self._store = store

    async def suggest_reply(
        self,
        thread: NormalizedThread,
        property_context: PropertyContext | None = None,
    ) -> SuggestedReply:
        guest = thread.latest_guest_message
        if guest is None:
            return SuggestedReply(
                draft=NO_GUEST_MESSAGE_DRAFT, confidence=NO_GUEST_MESSAGE_CONFIDENCE
            )

        if self._llm is not None:
            try:
                context_text = await self._load_context_text(property_context)
                prompt = self.build_prompt(thread, guest, property_context, context_text)
                reply = await self._llm.generate_reply(prompt)
                logger.info(
                    "llm_reply_generated",
                    provider=type(self._llm).__name__,
                    confidence=reply.confidence,
                )
                return reply
            except Exception as e:
                logger.warning("llm_reply_failed_using_template", error=str(e))

        return self.template_reply(guest, property_context)

    async def _load_context_text(self, property_context: PropertyContext | None) -> str | None:
        if property_context is None:
            return None
        if property_context.context_text:
            return property_context.context_text
        if self._store is None:
            return None
        try:
            return await self._store.get_property_context(property_context.property_id)
        except Exception as e:
            logger.warning(
                "property_context_fetch_failed",
                property_id=property_context.property_id,
                error=str(e),
            )
            return None

    @staticmethod
    def build_prompt(
        thread: NormalizedThread,
        guest: LatestGuestMessage,
        property_context: PropertyContext | None,
        context_text: str | None,
    ) -> str:
        """Assemble the LLM prompt from property context and thread history."""
        parts = [
            "Generate a professional, friendly email reply for a property host "
            "responding to a guest inquiry."
        ]
        if context_text:
            parts.append(f"Property context:\n{context_text}")
        if property_context is not None and property_context.property_name:
            parts.append(f"Property name: {property_context.property_name}")
        parts.append(f"Email thread history:\n{thread.full_thread_text}")
        parts.append(
            f"Latest guest message:\nFrom: {guest.from_address}\n"
            f"Subject: {guest.subject}\n\n{guest.body_plain}"
        )
        parts.append(
            "Generate a concise, helpful reply to the guest. Be warm, professional, "
            "and address any questions or concerns they may have."
        )
        return "\n\n".join(parts)

    @staticmethod
    def template_reply(
        guest: LatestGuestMessage,
        property_context: PropertyContext | None = None,
    ) -> SuggestedReply:
        """Placeholder reply chosen by keywords in the guest message."""
        text = guest.body_plain.lower()
        draft = _DEFAULT_TEMPLATE
        for keywords, template in _TEMPLATES:
            if any(keyword in text for keyword in keywords):
                draft = template
                break

        if property_context is not None and property_context.property_name:
            greeting = (
                f"Hello,\n\nThank you for reaching out about {property_context.property_name}.\n\n"
            )
        else:
            greeting = "Hello,\n\n"
        return SuggestedReply(draft=f"{greeting}{draft}", confidence=TEMPLATE_CONFIDENCE)
