
from dataclasses import dataclass
from enum import Enum


class Provider(str, Enum):
    OLLAMA = "ollama"        # line-delimited JSON on /api/generate
    LMSTUDIO = "lmstudio"    # OpenAI-compatible event stream on /v1/chat/completions

    @classmethod
    def from_id(cls, provider_id):
        if isinstance(provider_id, cls):
            return provider_id
        try:
            return cls(str(provider_id).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown provider '{provider_id}'") from None


DEFAULT_ENDPOINTS = {
    Provider.OLLAMA: "http://localhost:11434",
    Provider.LMSTUDIO: "http://localhost:1234",
}

AUTO_LANGUAGE = "auto"

# Target languages offered to the user, keyed by the name sent to the model
LANGUAGES = {
    "Japanese": "日本語",
    "English": "English",
    "Chinese": "中文",
    "Korean": "한국어",
    "French": "Français",
    "German": "Deutsch",
    "Spanish": "Español",
}


@dataclass(frozen=True)
class CompletionRequest:
    text: str
    source_lang: str
    target_lang: str
    provider_id: str
    endpoint_url: str
    model_name: str

    def __post_init__(self):
        Provider.from_id(self.provider_id)

    @property
    def provider(self):
        return Provider.from_id(self.provider_id)


@dataclass(frozen=True)
class ExplanationRequest:
    source_text: str
    source_lang: str
    target_lang: str
    provider_id: str
    endpoint_url: str
    model_name: str

    def __post_init__(self):
        Provider.from_id(self.provider_id)

    @property
    def provider(self):
        return Provider.from_id(self.provider_id)


@dataclass(frozen=True)
class StreamDelta:
    text_fragment: str
    is_final: bool = False
