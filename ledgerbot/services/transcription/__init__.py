"""Transcription service package for speech-to-text."""

from ledgerbot.services.transcription.base import TranscriptionService, TranscriptionResult
from ledgerbot.services.transcription.whisper_api import WhisperApiTranscriptionService

__all__ = ["TranscriptionService", "TranscriptionResult", "WhisperApiTranscriptionService"]
