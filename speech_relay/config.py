from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

SttEncoding = Literal["WEBM_OPUS", "OGG_OPUS", "MP3", "FLAC", "MULAW", "ALAW", "LINEAR16"]
WavOutputFormat = Literal[
    "riff-16khz-16bit-mono-pcm",
    "riff-24khz-16bit-mono-pcm",
    "riff-48khz-16bit-mono-pcm",
]

class Settings(BaseSettings):
    # Azure Speech (transcription + synthesis)
    AZURE_SPEECH_KEY: str = Field(...)
    AZURE_SPEECH_REGION: str = Field("eastus")
    AZURE_SPEECH_ENDPOINT: str = Field("")

    # Azure Translator; blank key/region reuse the speech resource
    AZURE_TRANSLATOR_KEY: str = Field("")
    AZURE_TRANSLATOR_REGION: str = Field("")
    AZURE_TRANSLATOR_ENDPOINT: str = Field("https://api.cognitive.microsofttranslator.com")

    # Transcription input, fixed per deployment
    STT_ENCODING: SttEncoding = Field("WEBM_OPUS")
    STT_SAMPLE_RATE: int = Field(48000)
    STT_LANGUAGE: str = Field("es-GT")

    # Translation
    TRANSLATE_TARGET: str = Field("en")
    TRANSLATE_SOURCE: str = Field("")

    # Synthesis output, fixed per deployment
    TTS_LANGUAGE: str = Field("en-US")
    TTS_VOICE: str = Field("en-US-JennyNeural")
    TTS_GENDER: str = Field("Neutral")
    TTS_OUTPUT_FORMAT: WavOutputFormat = Field("riff-24khz-16bit-mono-pcm")

    # Audio files
    AUDIO_DIR: str = Field("audio_files")
    SCRATCH_DIR: str = Field("scratch_files")
    AUDIO_MAX_AGE_SECS: int = Field(0)
    AUDIO_MAX_FILES: int = Field(0)

    # HTTP
    HOST: str = Field("0.0.0.0")
    PORT: int = Field(3001)
    PUBLIC_BASE_URL: str = Field("http://localhost:3001")
    CORS_ORIGIN: str = Field("http://localhost:5173")

    # Ops
    REQUEST_TIMEOUT_SECS: int = Field(30)
    LOG_LEVEL: str = Field("INFO")
    REDACT_LOGS: bool = Field(True)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
    )

    @property
    def translator_key(self) -> str:
        return self.AZURE_TRANSLATOR_KEY or self.AZURE_SPEECH_KEY

    @property
    def translator_region(self) -> str:
        return self.AZURE_TRANSLATOR_REGION or self.AZURE_SPEECH_REGION

@lru_cache()
def get_settings() -> Settings:
    return Settings()
