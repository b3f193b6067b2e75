"""Tests for WritingService, QASession and ChatSession."""

import pytest
from unittest.mock import MagicMock

from redtools.core.exceptions import ApiError
from redtools.services.writing_service import (
    ChatSession,
    QASession,
    WritingOption,
    WritingService,
)


@pytest.fixture
def mock_llm():
    llm = MagicMock()
    llm.complete.return_value = "LLM output"
    return llm


@pytest.fixture
def service(mock_llm):
    return WritingService(mock_llm)


class TestWritingOption:
    def test_from_name_variants(self):
        assert WritingOption.from_name("proofread") is WritingOption.PROOFREAD
        assert WritingOption.from_name("Key Points") is WritingOption.KEY_POINTS
        assert WritingOption.from_name("key-points") is WritingOption.KEY_POINTS
        assert WritingOption.from_name("KEY_POINTS") is WritingOption.KEY_POINTS

    def test_from_name_unknown(self):
        with pytest.raises(ValueError):
            WritingOption.from_name("poem")

    def test_every_option_has_prompt(self):
        for option in WritingOption:
            assert option.system_prompt.startswith("You are")

    def test_only_custom_is_custom(self):
        assert [o for o in WritingOption if o.is_custom] == [WritingOption.CUSTOM]


class TestApply:
    def test_prompt_is_system_prompt_then_text(self, service, mock_llm):
        assert service.apply(WritingOption.PROOFREAD, "teh text") == "LLM output"
        prompt = mock_llm.complete.call_args.args[0]
        assert prompt == WritingOption.PROOFREAD.system_prompt + "\n\nteh text"

    def test_custom_instruction_inserted(self, service, mock_llm):
        service.apply(WritingOption.CUSTOM, "body", instruction="  make it rhyme ")
        prompt = mock_llm.complete.call_args.args[0]
        assert prompt == WritingOption.CUSTOM.system_prompt + "\n\nInstruction: make it rhyme\n\nbody"

    def test_instruction_ignored_for_fixed_options(self, service, mock_llm):
        service.apply(WritingOption.TABLE, "body", instruction="ignored")
        assert "Instruction:" not in mock_llm.complete.call_args.args[0]

    def test_errors_propagate(self, service, mock_llm):
        mock_llm.complete.side_effect = ApiError(429, "rate limited")
        with pytest.raises(ApiError):
            service.apply(WritingOption.SUMMARY, "x")


class TestQuestions:
    def test_ask_about_text_records_history(self, service, mock_llm):
        session = QASession("generated")
        answer = service.ask_about_text("generated", "What?", session)

        assert answer == "LLM output"
        prompt = mock_llm.complete.call_args.args[0]
        assert prompt.startswith("Original Text:\ngenerated\n\nQuestion:\nWhat?\n\n")
        assert session.history[0].question == "What?"
        assert session.history[0].answer == "LLM output"

    def test_blank_question(self, service, mock_llm):
        assert service.ask_about_text("t", "  ") is None
        assert service.ask_about_image(b"img", "") is None
        mock_llm.complete.assert_not_called()

    def test_analyze_image(self, service, mock_llm):
        service.analyze_image(b"jpeg", "Describe")
        mock_llm.complete.assert_called_once_with("Describe", image=b"jpeg")

    def test_ask_about_image(self, service, mock_llm):
        service.ask_about_image(b"jpeg", "How many cats?")
        args, kwargs = mock_llm.complete.call_args
        assert "How many cats?" in args[0]
        assert kwargs["image"] == b"jpeg"


class TestQASession:
    def test_full_content_without_history(self):
        assert QASession("Hi").full_content() == "Original Response:\nHi\n\n"

    def test_full_content_with_history(self):
        session = QASession("Hi")
        session.add("Q one", "A one")
        session.add("Q two", "A two")
        assert session.full_content() == (
            "Original Response:\nHi\n\n"
            "Q&A History:\n"
            "\nQ1: Q one\nA1: A one\n"
            "\nQ2: Q two\nA2: A two\n"
        )

    def test_reset(self):
        session = QASession("old")
        session.add("q", "a")
        session.reset("new")
        assert session.content == "new"
        assert session.history == []


class TestChatSession:
    def test_transcript_grows(self, mock_llm):
        mock_llm.complete.side_effect = ["Hello!", "Fine."]
        chat = ChatSession(mock_llm)

        chat.send("Hi")
        reply = chat.send("  How are you?  ")

        assert reply.text == "Fine."
        assert [m.role for m in chat.conversation] == ["user", "assistant", "user", "assistant"]
        second_prompt = mock_llm.complete.call_args_list[1].args[0]
        assert "User: Hi\n\nAssistant: Hello!\n\nUser: How are you?\n\n" in second_prompt
        assert second_prompt.startswith("You are a helpful AI assistant in a multi-turn conversation.")

    def test_blank_message_ignored(self, mock_llm):
        chat = ChatSession(mock_llm)
        assert chat.send("   ") is None
        assert chat.conversation == []
        mock_llm.complete.assert_not_called()

    def test_error_recorded_as_assistant_message(self, mock_llm):
        mock_llm.complete.side_effect = ApiError(500)
        chat = ChatSession(mock_llm)
        reply = chat.send("Hi")
        assert reply.role == "assistant"
        assert reply.text == "Error: Server returned an error (HTTP 500)"
        assert len(chat.conversation) == 2

    def test_start_chat_uses_service_llm(self, service, mock_llm):
        chat = service.start_chat()
        chat.send("yo")
        mock_llm.complete.assert_called_once()
