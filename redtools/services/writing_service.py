"""Writing service: rewrite options, Q&A, image analysis and chat via the LLM."""

import logging
from enum import Enum
from typing import Optional

from redtools.adapters.llm_adapter import LLMAdapter
from redtools.core.exceptions import RedToolsError
from redtools.core.types import ChatMessage, QAEntry

logger = logging.getLogger("redtools")

_SAME_LANGUAGE = "Perform this task in the same language as the provided text."
_NO_EXTRAS = (
    "Do not include additional suggestions or formatting in your response."
)


class WritingOption(str, Enum):
    CUSTOM = "Custom"
    PROOFREAD = "Proofread"
    REWRITE = "Rewrite"
    FRIENDLY = "Friendly"
    PROFESSIONAL = "Professional"
    CONCISE = "Concise"
    SUMMARY = "Summary"
    KEY_POINTS = "Key Points"
    TABLE = "Table"

    @property
    def is_custom(self) -> bool:
        return self is WritingOption.CUSTOM

    @property
    def system_prompt(self) -> str:
        return _SYSTEM_PROMPTS[self]

    @classmethod
    def from_name(cls, name: str) -> 'WritingOption':
        """Look up by value or member name, case-insensitively ("key-points" works)."""
        wanted = name.strip().lower().replace("-", " ").replace("_", " ")
        for option in cls:
            if wanted in (option.value.lower(), option.name.lower().replace("_", " ")):
                return option
        raise ValueError(f"Unknown writing option: {name}")


def _rewrite_prompt(goal: str, keep: str, output: str) -> str:
    return (
        f"You are a rewriting assistant. Your sole task is to rewrite the text provided "
        f"by the user to {goal}.\n"
        f"Maintain the original {keep}. {_SAME_LANGUAGE}\n"
        f"Output ONLY the {output} without any comments, explanations, or analysis. "
        f"{_NO_EXTRAS}"
    )


_SYSTEM_PROMPTS = {
    WritingOption.CUSTOM: (
        "You are a writing and coding assistant. Your sole task is to apply the user's "
        "specified changes to the provided text.\n"
        "Output ONLY the modified text without any comments, explanations, or analysis.\n"
        f"{_NO_EXTRAS}"
    ),
    WritingOption.PROOFREAD: (
        "You are a grammar proofreading assistant. Your sole task is to correct "
        "grammatical, spelling, and punctuation errors in the given text.\n"
        f"Maintain the original text structure and writing style. {_SAME_LANGUAGE}\n"
        "Output ONLY the corrected text without any comments, explanations, or analysis. "
        f"{_NO_EXTRAS}"
    ),
    WritingOption.REWRITE: (
        "You are a rewriting assistant. Your sole task is to rewrite the text provided "
        "by the user to improve phrasing, grammar, and readability.\n"
        f"Maintain the original meaning and style. {_SAME_LANGUAGE}\n"
        "Output ONLY the rewritten text without any comments, explanations, or analysis. "
        f"{_NO_EXTRAS}"
    ),
    WritingOption.FRIENDLY: _rewrite_prompt(
        "make it sound more friendly and approachable",
        "meaning and structure",
        "rewritten friendly text",
    ),
    WritingOption.PROFESSIONAL: _rewrite_prompt(
        "make it sound more formal and professional",
        "meaning and structure",
        "rewritten professional text",
    ),
    WritingOption.CONCISE: _rewrite_prompt(
        "make it more concise and clear",
        "meaning and tone",
        "rewritten concise text",
    ),
    WritingOption.SUMMARY: (
        "You are a summarization assistant. Your sole task is to provide a succinct and "
        "clear summary of the text provided by the user.\n"
        f"Maintain the original context and key information. {_SAME_LANGUAGE}\n"
        "Output ONLY the summary without any comments, explanations, or analysis. Do not "
        "include additional suggestions. Use Markdown formatting with line spacing "
        "between sections."
    ),
    WritingOption.KEY_POINTS: (
        "You are an assistant for extracting key points from text. Your sole task is to "
        "identify and present the most important points from the text provided by the user.\n"
        f"Maintain the original context and order of importance. {_SAME_LANGUAGE}\n"
        "Output ONLY the key points in Markdown formatting (lists, bold, italics, etc.) "
        "without any comments, explanations, or analysis."
    ),
    WritingOption.TABLE: (
        "You are a text-to-table assistant. Convert the text into a Markdown table only. "
        f"Maintain the original context and information. {_SAME_LANGUAGE}\n"
        "Output ONLY the table without any comments, explanations, or analysis. Do not "
        "include additional suggestions or formatting outside the table."
    ),
}


class QASession:
    """A generated response plus the follow-up questions asked about it."""

    def __init__(self, content: str):
        self.content = content
        self.history: list[QAEntry] = []

    def add(self, question: str, answer: str) -> None:
        self.history.append(QAEntry(question=question, answer=answer))

    def reset(self, content: str) -> None:
        self.content = content
        self.history.clear()

    def full_content(self) -> str:
        """Original response followed by the numbered Q&A history."""
        text = f"Original Response:\n{self.content}\n\n"
        if self.history:
            text += "Q&A History:\n"
            for index, qa in enumerate(self.history, start=1):
                text += f"\nQ{index}: {qa.question}\nA{index}: {qa.answer}\n"
        return text


class WritingService:
    """Applies writing options and answers questions about text or images."""

    def __init__(self, llm: LLMAdapter):
        self._llm = llm

    def set_llm(self, llm: LLMAdapter) -> None:
        self._llm = llm

    def apply(self, option: WritingOption, text: str, instruction: str = "") -> str:
        """Run one writing option over text.

        Raises:
            ConfigError, NetworkError, ApiError, ParseError
        """
        prompt = self._build_option_prompt(option, text, instruction)
        logger.info(f"Applying writing option '{option.value}' ({len(text)} chars)")
        return self._llm.complete(prompt)

    def ask_about_text(self, text: str, question: str,
                       session: Optional[QASession] = None) -> Optional[str]:
        """Answer a question using only the given text. Blank questions are ignored."""
        if not question.strip():
            return None
        answer = self._llm.complete(self._build_text_question_prompt(text, question))
        if session is not None:
            session.add(question, answer)
        return answer

    def analyze_image(self, image: bytes, prompt: str) -> str:
        """Send JPEG bytes with a free-form prompt."""
        logger.info(f"Analyzing image ({len(image)} bytes)")
        return self._llm.complete(prompt, image=image)

    def ask_about_image(self, image: bytes, question: str) -> Optional[str]:
        if not question.strip():
            return None
        return self._llm.complete(self._build_image_question_prompt(question), image=image)

    def start_chat(self) -> 'ChatSession':
        return ChatSession(self._llm)

    @staticmethod
    def _build_option_prompt(option: WritingOption, text: str, instruction: str = "") -> str:
        if option.is_custom and instruction.strip():
            return f"{option.system_prompt}\n\nInstruction: {instruction.strip()}\n\n{text}"
        return f"{option.system_prompt}\n\n{text}"

    @staticmethod
    def _build_text_question_prompt(text: str, question: str) -> str:
        return (
            "Original Text:\n"
            f"{text}\n"
            "\n"
            "Question:\n"
            f"{question}\n"
            "\n"
            "Please provide a direct answer based solely on the original text above."
        )

    @staticmethod
    def _build_image_question_prompt(question: str) -> str:
        return (
            "Based on the image I shared earlier, please answer this question:\n"
            f"{question}\n"
            "\n"
            "Please provide a direct answer based solely on what you can see in the image."
        )


class ChatSession:
    """Multi-turn chat; every turn resends the whole transcript."""

    def __init__(self, llm: LLMAdapter):
        self._llm = llm
        self.conversation: list[ChatMessage] = []

    def send(self, text: str) -> Optional[ChatMessage]:
        """Add a user message and the assistant's reply.

        Failures are recorded as an "Error: ..." assistant message rather
        than raised, so the transcript always shows what happened.
        """
        trimmed = text.strip()
        if not trimmed:
            return None

        self.conversation.append(ChatMessage(role="user", text=trimmed))
        try:
            reply = ChatMessage(role="assistant", text=self._llm.complete(self.transcript()))
        except RedToolsError as e:
            logger.error(f"Chat request failed: {e}")
            reply = ChatMessage(role="assistant", text=f"Error: {e.message}")
        self.conversation.append(reply)
        return reply

    def transcript(self) -> str:
        history = ""
        for message in self.conversation:
            speaker = "User" if message.role == "user" else "Assistant"
            history += f"{speaker}: {message.text}\n\n"
        return (
            "You are a helpful AI assistant in a multi-turn conversation.\n"
            "The conversation so far:\n"
            "\n"
            f"{history}"
            "\n"
            "Please continue the conversation. Do NOT restate the user's last question; "
            "respond directly, referencing the entire conversation."
        )
