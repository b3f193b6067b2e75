"""Abstract base class for LLM access."""

from abc import ABC, abstractmethod
from typing import Optional


class LLMAdapter(ABC):
    """Abstract interface for one-shot text generation."""

    @abstractmethod
    def complete(self, prompt: str, image: Optional[bytes] = None) -> str:
        """Generate text from a prompt.

        Args:
            prompt: The input prompt text
            image: Optional JPEG bytes sent alongside the prompt

        Returns:
            The generated text

        Raises:
            ConfigError: Credentials missing
            NetworkError: Service not reachable or timed out
            ApiError: Non-success HTTP status
            ParseError: Response did not contain generated text
        """
        ...
