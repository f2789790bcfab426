"""Base interface for transcription service.

This module defines the TranscriptionService abstract base class
and TranscriptionResult dataclass.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class TranscriptionResult:
    """
    Result of a transcription operation.

    Attributes:
        text: Transcribed text content
        language: Detected or configured language code
        success: Whether transcription completed successfully
        error_message: Error description if success is False
    """

    text: str
    language: str
    success: bool
    error_message: Optional[str] = None

    @classmethod
    def failure(cls, error_message: str) -> "TranscriptionResult":
        """Create a failed transcription result."""
        return cls(
            text="",
            language="",
            success=False,
            error_message=error_message,
        )


class TranscriptionService(ABC):
    """
    Abstract base class for transcription services.

    Implementations never raise for a failed transcription; they return
    TranscriptionResult.failure() so the caller can answer the user.
    Failures are not retried: re-fetching stale media is unreliable.
    """

    @abstractmethod
    def is_ready(self) -> bool:
        """
        Check if the service can accept requests.

        Returns:
            True if ready, False otherwise
        """
        pass

    @abstractmethod
    async def transcribe_url(self, media_url: str, language: str = "pt") -> TranscriptionResult:
        """
        Download and transcribe one audio message.

        Args:
            media_url: Retrievable URL of the audio
            language: Language hint (ISO 639-1)

        Returns:
            TranscriptionResult with transcribed text or error
        """
        pass
