
from selection_translator.config_loader import get_config_value
from selection_translator.event_sink import EXPLANATION_CHUNK, TRANSLATION_CHUNK, relay_stream
from selection_translator.logging_config import get_logger
from selection_translator.models import CompletionRequest, ExplanationRequest
from selection_translator.prompt_builder import (
    EXPLAINER_PREAMBLE,
    TRANSLATOR_PREAMBLE,
    build_explanation_prompt,
    build_translation_prompt,
)

logger = get_logger(__name__)


def _backend_fields(config):
    return {
        "source_lang": get_config_value(config, "translation.source_lang", "auto"),
        "target_lang": get_config_value(config, "translation.target_lang", "English"),
        "provider_id": get_config_value(config, "provider.id", "ollama"),
        "endpoint_url": get_config_value(config, "provider.endpoint", ""),
        "model_name": get_config_value(config, "provider.model", "llama3"),
    }


def translation_request(config, text):
    return CompletionRequest(text=text, **_backend_fields(config))


def explanation_request(config, text):
    return ExplanationRequest(source_text=text, **_backend_fields(config))


class TranslatorCore:
    """
    The operations the UI layer calls: translate, explain and
    update_shortcut. Fragments stream to `sink` as they arrive; the
    coroutines return the full trimmed text.
    """

    def __init__(self, client, registry, sink):
        self.client = client
        self.registry = registry
        self.sink = sink

    async def translate(self, request):
        logger.info("Translating %d chars to %s", len(request.text), request.target_lang)
        prompt = build_translation_prompt(request.text, request.source_lang, request.target_lang)
        deltas = self.client.stream_completion(request, prompt, TRANSLATOR_PREAMBLE)
        result = await relay_stream(deltas, self.sink, TRANSLATION_CHUNK)
        logger.debug("Translation finished (%d chars)", len(result))
        return result

    async def explain(self, request):
        logger.info("Explaining %d chars in %s", len(request.source_text), request.target_lang)
        prompt = build_explanation_prompt(request.source_text, request.source_lang, request.target_lang)
        deltas = self.client.stream_completion(request, prompt, EXPLAINER_PREAMBLE)
        result = await relay_stream(deltas, self.sink, EXPLANATION_CHUNK)
        logger.debug("Explanation finished (%d chars)", len(result))
        return result

    def update_shortcut(self, text):
        """Raises ParseError or RegistrationError; the active shortcut is then unchanged."""
        return self.registry.update_shortcut(text)
