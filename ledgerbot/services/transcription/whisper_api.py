"""Hosted Whisper transcription service using httpx.

Downloads the voice note from the messaging network and posts it to
the OpenAI audio transcription endpoint.
"""

import logging
from typing import Optional

import httpx

from ledgerbot.lib.config import TranscriptionConfig
from ledgerbot.lib.exceptions import TranscriptionError
from ledgerbot.services.transcription.base import TranscriptionResult, TranscriptionService

logger = logging.getLogger(__name__)


class WhisperApiTranscriptionService(TranscriptionService):
    """
    OpenAI Whisper API transcription.

    Environment Variables:
        OPENAI_API_KEY: Required. Your OpenAI API key.
        TRANSCRIPTION_MODEL: Optional. Model to use (default: whisper-1).
        OPENAI_BASE_URL: Optional. API base URL (default: https://api.openai.com/v1).
    """

    def __init__(
        self,
        config: TranscriptionConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the transcription service.

        Args:
            config: Transcription configuration (key, model, timeout)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.config = config
        self._transport = transport
        self._api_url = f"{config.base_url.rstrip('/')}/audio/transcriptions"

    @property
    def provider_name(self) -> str:
        return "openai-whisper"

    def is_ready(self) -> bool:
        return self.config.is_configured()

    async def transcribe_url(self, media_url: str, language: str = "pt") -> TranscriptionResult:
        if not self.is_ready():
            return TranscriptionResult.failure("OPENAI_API_KEY não configurada")

        if not media_url:
            return TranscriptionResult.failure("Audio URL missing")

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout, transport=self._transport
            ) as client:
                audio = await self._download(client, media_url)
                text = await self._transcribe(client, audio, language)
        except TranscriptionError as e:
            logger.error(f"Transcription failed for {media_url}: {e}")
            return TranscriptionResult.failure(e.message)

        logger.info(f"✅ Audio transcribed: {len(text)} chars")
        return TranscriptionResult(text=text, language=language, success=True)

    async def _download(self, client: httpx.AsyncClient, media_url: str) -> bytes:
        try:
            response = await client.get(media_url)
        except httpx.TimeoutException as e:
            raise TranscriptionError(
                f"Audio download timed out after {self.config.timeout}s",
                provider=self.provider_name,
                original_error=e,
            )
        except httpx.RequestError as e:
            raise TranscriptionError(
                f"Audio download failed: {e}",
                provider=self.provider_name,
                original_error=e,
            )

        if response.status_code != 200:
            raise TranscriptionError(
                f"Audio download returned HTTP {response.status_code}",
                provider=self.provider_name,
            )

        return response.content

    async def _transcribe(self, client: httpx.AsyncClient, audio: bytes, language: str) -> str:
        headers = {"Authorization": f"Bearer {self.config.api_key}"}
        files = {"file": ("audio.ogg", audio, "audio/ogg")}
        data = {"model": self.config.model_name, "language": language}

        try:
            response = await client.post(self._api_url, headers=headers, files=files, data=data)
        except httpx.TimeoutException as e:
            raise TranscriptionError(
                f"Request timed out after {self.config.timeout}s",
                provider=self.provider_name,
                original_error=e,
            )
        except httpx.RequestError as e:
            raise TranscriptionError(
                f"Network error: {e}",
                provider=self.provider_name,
                original_error=e,
            )

        if response.status_code != 200:
            try:
                error_data = response.json() if response.text else {}
            except ValueError:
                error_data = {}
            error_message = (error_data.get("error") or {}).get(
                "message", f"HTTP {response.status_code}"
            )
            raise TranscriptionError(f"API error: {error_message}", provider=self.provider_name)

        try:
            payload = response.json()
        except ValueError as e:
            raise TranscriptionError(
                "Invalid JSON response", provider=self.provider_name, original_error=e
            )

        text = (payload.get("text") or "").strip()
        if not text:
            raise TranscriptionError("Empty transcription", provider=self.provider_name)

        return text
