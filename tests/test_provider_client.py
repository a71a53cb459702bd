import asyncio
import itertools
import json

import httpx
import pytest

from selection_translator.errors import HttpStatusError, TransportError
from selection_translator.models import CompletionRequest, StreamDelta
from selection_translator.provider_client import ProviderClient


class ChunkStream(httpx.AsyncByteStream):
    def __init__(self, chunks):
        self.chunks = chunks

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk


def make_request(provider_id="ollama", endpoint="http://localhost:11434"):
    return CompletionRequest(
        text="Hello",
        source_lang="auto",
        target_lang="French",
        provider_id=provider_id,
        endpoint_url=endpoint,
        model_name="llama3",
    )


def run_stream(client, request, received, prompt="PROMPT", preamble="PREAMBLE"):
    async def consume():
        async for delta in client.stream_completion(request, prompt, preamble):
            received.append(delta)

    asyncio.run(consume())
    return received


def test_ollama_payload_and_deltas():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, stream=ChunkStream([
            b'{"response":"Bon","done":false}\n{"resp',
            b'onse":"jour","done":false}\n',
            b'{"response":"","done":true}\n',
        ]))

    client = ProviderClient(transport=httpx.MockTransport(handler))
    deltas = run_stream(client, make_request(), [])

    assert seen["path"] == "/api/generate"
    assert seen["body"] == {"model": "llama3", "prompt": "PROMPT", "stream": True}
    assert deltas == [StreamDelta("Bon"), StreamDelta("jour"), StreamDelta("", is_final=True)]


def test_trailing_slash_on_endpoint():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        return httpx.Response(200, content=b'{"response":"x","done":true}\n')

    client = ProviderClient(transport=httpx.MockTransport(handler))
    run_stream(client, make_request(endpoint="http://localhost:11434/"), [])

    assert seen["path"] == "/api/generate"


def test_chat_payload_and_deltas():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(
            200,
            headers={"content-type": "text/event-stream"},
            stream=ChunkStream([
                b'data: {"choices":[{"delta":{"role":"assistant"}}]}\n\n',
                b'data: {"choices":[{"delta":{"content":"Bon"}}]}\n\ndata: {"choi',
                b'ces":[{"delta":{"content":"jour"}}]}\n\n',
                b"data: [DONE]\n\n",
            ]),
        )

    client = ProviderClient(api_key="secret", transport=httpx.MockTransport(handler))
    deltas = run_stream(client, make_request("lmstudio", "http://localhost:1234"), [])

    assert seen["path"] == "/v1/chat/completions"
    body = seen["body"]
    assert body["model"] == "llama3"
    assert body["messages"] == [
        {"role": "system", "content": "PREAMBLE"},
        {"role": "user", "content": "PROMPT"},
    ]
    assert body["temperature"] == 0.3
    assert body["stream"] is True
    assert seen["auth"] == "Bearer secret"
    assert [d.text_fragment for d in deltas] == ["Bon", "jour", ""]
    assert deltas[-1].is_final


@pytest.mark.parametrize("provider_id", ["ollama", "lmstudio"])
def test_http_500_raises_before_any_delta(provider_id):
    def handler(request):
        return httpx.Response(500, text="model crashed")

    client = ProviderClient(transport=httpx.MockTransport(handler))
    received = []

    with pytest.raises(HttpStatusError) as excinfo:
        run_stream(client, make_request(provider_id), received)

    assert excinfo.value.status_code == 500
    assert "model crashed" in excinfo.value.body
    assert received == []


@pytest.mark.parametrize("provider_id", ["ollama", "lmstudio"])
def test_not_found_is_status_error(provider_id):
    def handler(request):
        return httpx.Response(404, json={"error": "model 'llama3' not found"})

    client = ProviderClient(transport=httpx.MockTransport(handler))

    with pytest.raises(HttpStatusError) as excinfo:
        run_stream(client, make_request(provider_id), [])

    assert excinfo.value.status_code == 404


@pytest.mark.parametrize("provider_id", ["ollama", "lmstudio"])
def test_timeout_is_transport_error(provider_id):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = ProviderClient(timeout=120, transport=httpx.MockTransport(handler))

    with pytest.raises(TransportError):
        run_stream(client, make_request(provider_id), [])


@pytest.mark.parametrize("provider_id", ["ollama", "lmstudio"])
def test_connection_refused_is_transport_error(provider_id):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = ProviderClient(transport=httpx.MockTransport(handler))

    with pytest.raises(TransportError):
        run_stream(client, make_request(provider_id), [])


def test_stream_without_done_marker_still_finishes():
    def handler(request):
        return httpx.Response(200, stream=ChunkStream([
            b'{"response":"Hi","done":false}\n',
            b'{"response":" there","done":false}',
        ]))

    client = ProviderClient(transport=httpx.MockTransport(handler))
    deltas = run_stream(client, make_request(), [])

    assert [d.text_fragment for d in deltas] == ["Hi", " there", ""]
    assert deltas[-1].is_final


def test_unknown_provider_is_rejected():
    with pytest.raises(ValueError):
        make_request("llamafile")


def test_stream_still_running_past_timeout_is_cut_off():
    def handler(request):
        return httpx.Response(200, stream=ChunkStream([
            b'{"response":"Bon","done":false}\n',
            b'{"response":"jour","done":false}\n',
            b'{"response":"","done":true}\n',
        ]))

    ticks = itertools.chain([0.0, 1.0], itertools.repeat(121.0))
    client = ProviderClient(timeout=120, transport=httpx.MockTransport(handler), clock=lambda: next(ticks))
    received = []

    with pytest.raises(TransportError, match="exceeded"):
        run_stream(client, make_request(), received)

    assert received == [StreamDelta("Bon")]
