"""
Model client interface.

The resilience layer treats the model as an opaque text function; any
client implementing ``ModelClient`` can be orchestrated.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from stylist_ai.types import ConversationMessage


class ModelClient(ABC):
    """Abstract base class for model inference clients."""

    @abstractmethod
    async def send_message(
        self,
        history: Sequence[ConversationMessage],
        system_prompt: str | None = None,
    ) -> str:
        """Send a conversation and return the assistant's text.

        Args:
            history: Conversation so far, oldest first
            system_prompt: Optional system prompt

        Returns:
            Response text
        """
        raise NotImplementedError

    @abstractmethod
    async def send_message_with_image(
        self,
        image_base64: str,
        prompt: str,
        system_prompt: str | None = None,
    ) -> str:
        """Send an image with a prompt and return the response text.

        Args:
            image_base64: Base64-encoded JPEG or PNG
            prompt: Instruction for the image
            system_prompt: Optional system prompt

        Returns:
            Response text
        """
        raise NotImplementedError

    async def close(self) -> None:  # noqa: B027
        """Release client resources."""
