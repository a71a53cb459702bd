
import time
from contextlib import aclosing

import httpx
import openai

from selection_translator.errors import HttpStatusError, TransportError
from selection_translator.logging_config import get_logger
from selection_translator.models import Provider, StreamDelta
from selection_translator.stream_decoder import StreamDecoder

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 120.0
CHAT_TEMPERATURE = 0.3


class ProviderClient:
    """
    Streams a completion from either backend and normalizes both wire
    formats into one ordered sequence of StreamDelta.

    Holds no per-request state: every call opens and closes its own HTTP
    client. `transport` is an optional httpx transport used instead of the
    network (tests pass an httpx.MockTransport).

    `timeout` bounds each connect and read and also the whole request: a
    backend still streaming once it has elapsed is cut off at the next chunk.
    """

    def __init__(self, timeout=DEFAULT_TIMEOUT, api_key="", transport=None, clock=time.monotonic):
        self.timeout = timeout
        self.api_key = api_key
        self.transport = transport
        self._clock = clock

    async def stream_completion(self, request, prompt, system_preamble):
        """
        Yields text deltas as they are decoded, then one empty delta with
        is_final=True once the body has ended (marker or not).

        Raises HttpStatusError before anything is yielded if the backend
        answers with a non-2xx status, TransportError on network failure
        or timeout.
        """
        provider = request.provider
        endpoint = request.endpoint_url.rstrip("/")
        decoder = StreamDecoder.for_provider(provider)

        if provider is Provider.OLLAMA:
            # No system-role channel; the prompt already carries the role
            chunks = self._generate_chunks(endpoint, request.model_name, prompt)
        else:
            chunks = self._chat_chunks(endpoint, request.model_name, prompt, system_preamble)

        logger.debug("Streaming from %s (%s, model=%s)", endpoint, provider.value, request.model_name)
        deadline = self._clock() + self.timeout
        async with aclosing(chunks):
            async for chunk in chunks:
                if self._clock() > deadline:
                    raise TransportError(f"Request to {endpoint} exceeded {self.timeout}s")
                for delta in decoder.feed(chunk):
                    yield delta

        for delta in decoder.finish():
            yield delta
        if decoder.skipped:
            logger.debug("Dropped %d undecodable line(s) from %s", decoder.skipped, endpoint)
        yield StreamDelta("", is_final=True)

    async def _generate_chunks(self, endpoint, model, prompt):
        url = f"{endpoint}/api/generate"
        payload = {"model": model, "prompt": prompt, "stream": True}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                async with client.stream("POST", url, json=payload) as response:
                    if not response.is_success:
                        await response.aread()
                        raise HttpStatusError(response.status_code, response.text)
                    async for chunk in response.aiter_bytes():
                        yield chunk
        except httpx.TimeoutException as ex:
            raise TransportError(f"Request to {url} timed out after {self.timeout}s") from ex
        except httpx.TransportError as ex:
            raise TransportError(f"Request to {url} failed: {ex}") from ex

    async def _chat_chunks(self, endpoint, model, prompt, system_preamble):
        url = f"{endpoint}/v1/chat/completions"
        http_client = None
        if self.transport is not None:
            http_client = httpx.AsyncClient(transport=self.transport)

        client = openai.AsyncOpenAI(
            # Local servers ignore the key but the SDK insists on one
            api_key=self.api_key or "not-needed",
            base_url=f"{endpoint}/v1",
            timeout=self.timeout,
            max_retries=0,
            http_client=http_client,
        )

        try:
            async with client:
                # Raw response: the SDK sends the request and checks the
                # status, the bytes are decoded by our own StreamDecoder
                async with client.chat.completions.with_streaming_response.create(
                    model=model,
                    messages=[
                        {"role": "system", "content": system_preamble},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=CHAT_TEMPERATURE,
                    stream=True,
                ) as response:
                    async for chunk in response.iter_bytes():
                        yield chunk
        except openai.APIStatusError as ex:
            raise HttpStatusError(ex.status_code, ex.response.text) from ex
        except openai.APITimeoutError as ex:
            raise TransportError(f"Request to {url} timed out after {self.timeout}s") from ex
        except openai.APIConnectionError as ex:
            raise TransportError(f"Request to {url} failed: {ex}") from ex
        except httpx.TimeoutException as ex:
            raise TransportError(f"Request to {url} timed out after {self.timeout}s") from ex
        except httpx.TransportError as ex:
            raise TransportError(f"Request to {url} failed: {ex}") from ex
