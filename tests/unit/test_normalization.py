"""Unit tests for guest_knows thread normalization."""

from typing import Any

import pytest

from guest_knows.errors import PayloadValidationError
from guest_knows.models.email import EmailMessage
from guest_knows.models.knowledge import ContentType, IngestMethod, Platform
from guest_knows.services.normalization import ThreadNormalizationService, has_guest_question
from mocks.payloads import make_message, make_payload


def _emails(*messages: dict[str, Any]) -> list[EmailMessage]:
    return [EmailMessage.model_validate(m) for m in messages]


class TestHasGuestQuestion:
    """Tests for the guest question classifier."""

    @pytest.mark.parametrize(
        "text",
        [
            "Where is the nearest grocery store?",
            "CHECK-IN procedure?",
            "?",
            "Could you tell me more about the parking situation",
        ],
    )
    def test_questions(self, text: str) -> None:
        assert has_guest_question(text) is True

    @pytest.mark.parametrize(
        "text",
        [
            "Thanks!",
            "thank you",
            "OK",
            "Sounds good.",
            "Confirmed",
            "Perfect!",
            "Is it ok",
            "Great stay overall, merci beaucoup",
            "",
            None,
        ],
    )
    def test_not_questions(self, text: str | None) -> None:
        assert has_guest_question(text) is False

    def test_acknowledgment_beats_question_mark(self) -> None:
        # Only exact acknowledgments are rejected; anything else with "?" passes
        assert has_guest_question("Thanks?") is True
        assert has_guest_question("ok?") is True

    def test_question_word_needs_length(self) -> None:
        short = "how about noon"
        assert len(short) <= 20
        assert has_guest_question(short) is False
        assert has_guest_question(short + " on the day we arrive") is True


class TestExtractLatestGuestMessage:
    """Tests for picking the latest guest-authored message."""

    def test_skips_newer_host_message(
        self,
        normalization_service: ThreadNormalizationService,
        guest_message: dict[str, Any],
        host_message: dict[str, Any],
    ) -> None:
        result = normalization_service.extract_latest_guest_message(
            _emails(guest_message, host_message)
        )
        assert result is not None
        assert result.id == guest_message["id"]

    def test_most_recent_guest_message_wins(
        self, normalization_service: ThreadNormalizationService
    ) -> None:
        older = make_message(id="old", date="2024-03-01T08:00:00Z", bodyPlain="First note")
        newer = make_message(id="new", date="2024-03-02T08:00:00Z", bodyPlain="Second note")
        result = normalization_service.extract_latest_guest_message(_emails(newer, older))
        assert result is not None
        assert result.id == "new"

    def test_skips_platform_message_without_guest_text(
        self, normalization_service: ThreadNormalizationService
    ) -> None:
        guest = make_message(id="direct", date="2024-03-01T08:00:00Z")
        marketing = make_message(
            id="promo",
            date="2024-03-03T08:00:00Z",
            bodyPlain="Earn more by listing another home!",
            **{"from": "news@airbnb.com"},
        )
        result = normalization_service.extract_latest_guest_message(_emails(guest, marketing))
        assert result is not None
        assert result.id == "direct"

    def test_none_when_only_host_messages(
        self, normalization_service: ThreadNormalizationService, host_message: dict[str, Any]
    ) -> None:
        assert normalization_service.extract_latest_guest_message(_emails(host_message)) is None

    def test_extracts_platform_text(
        self, normalization_service: ThreadNormalizationService, vrbo_message: dict[str, Any]
    ) -> None:
        result = normalization_service.extract_latest_guest_message(_emails(vrbo_message))
        assert result is not None
        assert result.body_plain == "Hi! I was wondering if I can change dates"


class TestBuildFullThreadText:
    """Tests for the chronological thread rendering."""

    def test_single_message_format(
        self, normalization_service: ThreadNormalizationService, guest_message: dict[str, Any]
    ) -> None:
        text = normalization_service.build_full_thread_text(_emails(guest_message))
        assert text == (
            "--- Message 1 ---\n"
            "From: Jane Guest <jane@example.com>\n"
            "To: host@capehost.ai\n"
            "Date: 2024-03-01T10:00:00Z\n"
            "Subject: Question about my stay\n"
            "\n"
            "Hi, is parking available at the property?"
        )

    def test_orders_oldest_first(self, normalization_service: ThreadNormalizationService) -> None:
        messages = _emails(
            make_message(id="c", date="2024-03-03T00:00:00Z", bodyPlain="third"),
            make_message(id="a", date="Fri, 01 Mar 2024 09:00:00 +0000", bodyPlain="first"),
            make_message(id="b", date="2024-03-02T00:00:00Z", bodyPlain="second"),
        )
        text = normalization_service.build_full_thread_text(messages)
        assert text.index("first") < text.index("second") < text.index("third")
        assert "--- Message 3 ---" in text
        assert "\n\n--- Message 2 ---" in text

    def test_unparseable_dates_sort_first(
        self, normalization_service: ThreadNormalizationService
    ) -> None:
        messages = _emails(
            make_message(id="b", date="2024-03-02T00:00:00Z", bodyPlain="dated"),
            make_message(id="a", date="sometime", bodyPlain="undated"),
        )
        text = normalization_service.build_full_thread_text(messages)
        first, second = text.split("--- Message 2 ---")
        assert "Date: sometime" in first
        assert first.rstrip().endswith("undated")
        assert "Date: 2024-03-02T00:00:00Z" in second

    def test_falls_back_to_html_then_empty(
        self, normalization_service: ThreadNormalizationService
    ) -> None:
        messages = _emails(
            make_message(id="a", bodyPlain=None, bodyHtml="<p>html body</p>"),
            make_message(id="b", date="2024-03-02T00:00:00Z", bodyPlain=None, to=None),
        )
        text = normalization_service.build_full_thread_text(messages)
        assert "<p>html body</p>" in text
        assert text.endswith(
            "To: \nDate: 2024-03-02T00:00:00Z\nSubject: Question about my stay\n\n"
        )

    def test_empty_thread(self, normalization_service: ThreadNormalizationService) -> None:
        assert normalization_service.build_full_thread_text([]) == ""


class TestNormalizeWebhookPayload:
    """Tests for building knowledge items from webhook payloads."""

    def test_vrbo_payload(
        self, normalization_service: ThreadNormalizationService, vrbo_message: dict[str, Any]
    ) -> None:
        item = normalization_service.normalize_webhook_payload(make_payload(vrbo_message))

        assert item.id is None
        assert item.platform == Platform.VRBO
        assert item.property_id == "4353572"
        assert item.platform_thread_id is None
        guest = item.normalized.latest_guest_message
        assert guest is not None
        assert guest.body_plain == "Hi! I was wondering if I can change dates"
        assert "-------" not in guest.body_plain
        assert item.normalized.has_guest_question is True

    def test_airbnb_payload(
        self, normalization_service: ThreadNormalizationService, airbnb_message: dict[str, Any]
    ) -> None:
        item = normalization_service.normalize_webhook_payload(make_payload(airbnb_message))

        assert item.platform == Platform.AIRBNB
        assert item.platform_thread_id == "2397383785"
        assert item.property_id is None
        assert item.normalized.has_guest_question is True

    def test_provenance_and_metadata(
        self, normalization_service: ThreadNormalizationService, sample_payload: dict[str, Any]
    ) -> None:
        item = normalization_service.normalize_webhook_payload(sample_payload)

        assert item.schema_version == "1.0.0"
        assert item.source == "gmail_webhook"
        assert item.ingest_method == IngestMethod.WEBHOOK
        assert item.content_type == ContentType.EMAIL_MESSAGE
        assert item.external_thread_id == "thread-1"
        assert item.raw_payload == sample_payload
        assert item.created_at.tzinfo is not None

        normalized = item.normalized
        assert normalized.message_count == 2
        assert normalized.subject == "Re: Question about my stay"
        assert normalized.from_address == "Cape Host <host@capehost.ai>"
        assert normalized.to == "jane@example.com"
        assert normalized.timestamps == ["2024-03-01T10:00:00Z", "2024-03-01T11:00:00Z"]
        assert normalized.has_guest_question is True
        assert normalized.latest_guest_message is not None
        assert normalized.latest_guest_message.id == "msg-1"

    def test_host_sender_has_no_platform(
        self, normalization_service: ThreadNormalizationService, sample_payload: dict[str, Any]
    ) -> None:
        item = normalization_service.normalize_webhook_payload(sample_payload)
        assert item.platform is None
        assert item.platform_thread_id is None

    def test_payload_source_and_schema_version_win(
        self, normalization_service: ThreadNormalizationService
    ) -> None:
        payload = make_payload(source="manual_upload", schema_version="2.0.0")
        item = normalization_service.normalize_webhook_payload(payload, source="uplisting_api")
        assert item.source == "manual_upload"
        assert item.schema_version == "2.0.0"

    def test_source_argument_used_when_payload_has_none(
        self, normalization_service: ThreadNormalizationService
    ) -> None:
        item = normalization_service.normalize_webhook_payload(
            make_payload(), source="uplisting_api"
        )
        assert item.source == "uplisting_api"

    def test_correlation_key_precedence(
        self, normalization_service: ThreadNormalizationService, vrbo_message: dict[str, Any]
    ) -> None:
        payload = make_payload(vrbo_message, property_id="payload-prop", booking_id="payload-book")

        from_payload = normalization_service.normalize_webhook_payload(payload)
        assert from_payload.property_id == "payload-prop"
        assert from_payload.booking_id == "payload-book"

        explicit = normalization_service.normalize_webhook_payload(
            payload, property_id="arg-prop", booking_id="arg-book"
        )
        assert explicit.property_id == "arg-prop"
        assert explicit.booking_id == "arg-book"

    def test_subject_fallbacks(self, normalization_service: ThreadNormalizationService) -> None:
        first = make_message(id="a", date="2024-03-01T00:00:00Z", subject="Original")
        last = make_message(id="b", date="2024-03-02T00:00:00Z", subject=None)
        item = normalization_service.normalize_webhook_payload(make_payload(first, last))
        assert item.normalized.subject == "Original"

        untitled = make_payload(make_message(subject=None))
        assert normalization_service.normalize_webhook_payload(untitled).normalized.subject == (
            "No Subject"
        )

    def test_no_guest_message(
        self, normalization_service: ThreadNormalizationService, host_message: dict[str, Any]
    ) -> None:
        item = normalization_service.normalize_webhook_payload(make_payload(host_message))
        assert item.normalized.latest_guest_message is None
        assert item.normalized.has_guest_question is False
        assert item.normalized.message_count == 1

    def test_payload_is_not_mutated(
        self, normalization_service: ThreadNormalizationService, sample_payload: dict[str, Any]
    ) -> None:
        snapshot = repr(sample_payload)
        normalization_service.normalize_webhook_payload(sample_payload)
        assert repr(sample_payload) == snapshot

    def test_numeric_ids_become_strings(
        self, normalization_service: ThreadNormalizationService
    ) -> None:
        payload = make_payload(
            make_message(id=12345), threadId=98765, property_id=4353572, booking_id=77
        )
        item = normalization_service.normalize_webhook_payload(payload)

        assert item.external_thread_id == "98765"
        assert item.property_id == "4353572"
        assert item.booking_id == "77"
        assert item.normalized.latest_guest_message.id == "12345"
        assert item.raw_payload["property_id"] == 4353572

    @pytest.mark.parametrize(
        ("message", "location"),
        [
            ({"from": {"name": "Jane"}}, "messages.0.from"),
            ({"bodyPlain": ["Hi"]}, "messages.0.bodyPlain"),
        ],
    )
    def test_mistyped_fields_raise_validation_error(
        self,
        normalization_service: ThreadNormalizationService,
        message: dict[str, Any],
        location: str,
    ) -> None:
        with pytest.raises(PayloadValidationError, match=f"^Invalid field {location}: "):
            normalization_service.normalize_webhook_payload(make_payload(make_message(**message)))
