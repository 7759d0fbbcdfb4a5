from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Anthropic Messages API; the key itself is never configured here, users supply it per workspace
	anthropic_base_url: str = Field(default="https://api.anthropic.com/v1/messages", validation_alias="THREADIFY_ANTHROPIC_BASE_URL")
	anthropic_version: str = Field(default="2023-06-01", validation_alias="THREADIFY_ANTHROPIC_VERSION")
	anthropic_model: str = Field(default="claude-3-5-sonnet-20241022", validation_alias="THREADIFY_ANTHROPIC_MODEL")
	anthropic_max_tokens: int = Field(default=1024, validation_alias="THREADIFY_ANTHROPIC_MAX_TOKENS")
	# None disables the client timeout (one human-paced request per session)
	generator_timeout_seconds: float | None = Field(default=None, validation_alias="THREADIFY_GENERATOR_TIMEOUT_SECONDS")

	# Saved library
	excerpt_length: int = Field(default=50, validation_alias="THREADIFY_EXCERPT_LENGTH")

	# Server-side dictation via Google Cloud Speech-to-Text (disabled by default; the browser recognizer is used)
	cloud_speech_enabled: bool = Field(default=False, validation_alias="THREADIFY_CLOUD_SPEECH_ENABLED")
	speech_language: str = Field(default="en-US", validation_alias="THREADIFY_SPEECH_LANGUAGE")

	log_level: str = Field(default="INFO", validation_alias="THREADIFY_LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
