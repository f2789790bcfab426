"""Configuration management via environment variables and pydantic-settings."""

from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field


class WhatsAppConfig(BaseSettings):
    """Configuration for the WhatsApp session manager."""

    instance_name: str = Field(
        default="FinanceAdmin",
        alias="WHATSAPP_INSTANCE_NAME",
        description="Session name, also used as the credential folder name",
    )

    auth_dir: str = Field(
        default="./sessions",
        alias="WHATSAPP_AUTH_DIR",
        description="Root directory for persisted session credentials",
    )

    transport: str = Field(
        default="",
        alias="WHATSAPP_TRANSPORT",
        description="Transport factory as 'package.module:callable'",
    )

    auto_start: bool = Field(
        default=True,
        alias="WHATSAPP_AUTO_START",
        description="Open the WhatsApp session when the daemon starts",
    )

    reconnect_base_ms: int = Field(
        default=3000,
        alias="WHATSAPP_RECONNECT_BASE_MS",
        description="Linear backoff step between reconnect attempts (milliseconds)",
    )

    reconnect_max_ms: int = Field(
        default=30000,
        alias="WHATSAPP_RECONNECT_MAX_MS",
        description="Upper bound for a single reconnect delay (milliseconds)",
    )

    max_reconnect_attempts: int = Field(
        default=5,
        alias="WHATSAPP_MAX_RECONNECT_ATTEMPTS",
        description="Consecutive transient failures before automatic retries stop",
    )

    startup_retry_seconds: float = Field(
        default=10.0,
        alias="WHATSAPP_STARTUP_RETRY_SECONDS",
        description="Delay before retrying a transport that failed to construct",
    )

    address_domain: str = Field(
        default="s.whatsapp.net",
        alias="WHATSAPP_ADDRESS_DOMAIN",
        description="Domain suffix for individual recipient addresses",
    )

    media_timeout: int = Field(
        default=30,
        alias="WHATSAPP_MEDIA_TIMEOUT",
        description="Timeout for downloading outbound images in seconds",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def auth_path(self) -> Path:
        """Get the credential folder for this instance as Path."""
        return Path(self.auth_dir) / self.instance_name

    def is_configured(self) -> bool:
        """Check if a transport factory is set."""
        return bool(self.transport) and ":" in self.transport


class TranscriptionConfig(BaseSettings):
    """Configuration for the hosted Whisper speech-to-text API."""

    api_key: str | None = Field(
        default=None,
        alias="OPENAI_API_KEY",
        description="OpenAI API key used for transcription",
    )

    base_url: str = Field(
        default="https://api.openai.com/v1",
        alias="OPENAI_BASE_URL",
        description="API base URL",
    )

    model_name: str = Field(
        default="whisper-1",
        alias="TRANSCRIPTION_MODEL",
        description="Transcription model identifier",
    )

    language: str = Field(
        default="pt",
        alias="TRANSCRIPTION_LANGUAGE",
        description="Language code for transcription (e.g., pt, en, es)",
    )

    timeout: int = Field(
        default=60,
        alias="TRANSCRIPTION_TIMEOUT",
        description="Timeout for media download and transcription in seconds",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    def is_configured(self) -> bool:
        """Check if an API key is available."""
        return bool(self.api_key)


class AutomationConfig(BaseSettings):
    """Configuration for the external automation webhook (n8n)."""

    webhook_url: str | None = Field(
        default=None,
        alias="N8N_WEBHOOK_URL",
        description="Webhook receiving image messages for external processing",
    )

    gateway_url: str | None = Field(
        default=None,
        alias="WHATSAPP_WEBHOOK_URL",
        description="External WhatsApp gateway used when the local session cannot send",
    )

    timeout: int = Field(
        default=30,
        alias="AUTOMATION_TIMEOUT",
        description="Timeout for webhook requests in seconds",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }


class LedgerConfig(BaseSettings):
    """Configuration for local ledger storage."""

    data_dir: str = Field(
        default="./data",
        alias="LEDGER_DATA_DIR",
        description="Directory for transactions and connection status",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def data_path(self) -> Path:
        """Get data directory as Path."""
        return Path(self.data_dir)

    @property
    def transactions_path(self) -> Path:
        """Append-only transactions file."""
        return self.data_path / "transactions.jsonl"

    @property
    def status_path(self) -> Path:
        """Connection status record polled by the UI."""
        return self.data_path / "whatsapp_status.json"


# Config instances (lazy loaded)
_whatsapp_config: WhatsAppConfig | None = None
_transcription_config: TranscriptionConfig | None = None
_automation_config: AutomationConfig | None = None
_ledger_config: LedgerConfig | None = None


def get_whatsapp_config() -> WhatsAppConfig:
    """Get the WhatsApp configuration instance."""
    global _whatsapp_config
    if _whatsapp_config is None:
        _whatsapp_config = WhatsAppConfig()
    return _whatsapp_config


def get_transcription_config() -> TranscriptionConfig:
    """Get the transcription configuration instance."""
    global _transcription_config
    if _transcription_config is None:
        _transcription_config = TranscriptionConfig()
    return _transcription_config


def get_automation_config() -> AutomationConfig:
    """Get the automation webhook configuration instance."""
    global _automation_config
    if _automation_config is None:
        _automation_config = AutomationConfig()
    return _automation_config


def get_ledger_config() -> LedgerConfig:
    """Get the ledger storage configuration instance."""
    global _ledger_config
    if _ledger_config is None:
        _ledger_config = LedgerConfig()
    return _ledger_config


def reset_all_configs() -> None:
    """Reset all configuration instances (useful for testing)."""
    global _whatsapp_config, _transcription_config, _automation_config, _ledger_config
    _whatsapp_config = None
    _transcription_config = None
    _automation_config = None
    _ledger_config = None
