
import asyncio

# Notification names shared with the UI layer
TRANSLATION_CHUNK = "translation-chunk"
EXPLANATION_CHUNK = "explanation-chunk"
TRANSLATE_SELECTION = "translate-selection"


class EventSink:
    """Receives named notifications, in the order they are emitted."""

    def emit(self, event, payload):
        raise NotImplementedError


class CallbackSink(EventSink):
    """Delivers every notification to `callback(event, payload)` synchronously."""

    def __init__(self, callback):
        self.callback = callback

    def emit(self, event, payload):
        self.callback(event, payload)


class LoopSink(EventSink):
    """
    Hands notifications to an asyncio loop from any thread. Consumers read
    (event, payload) tuples from `queue` on the loop.
    """

    def __init__(self, loop, queue=None):
        self.loop = loop
        self.queue = queue if queue is not None else asyncio.Queue()

    def emit(self, event, payload):
        self.loop.call_soon_threadsafe(self.queue.put_nowait, (event, payload))


async def relay_stream(deltas, sink, event):
    """
    Forwards each non-empty fragment to `sink` the moment it arrives and
    returns the whole answer, trimmed once at the end.
    """
    parts = []
    async for delta in deltas:
        if not delta.text_fragment:
            continue
        sink.emit(event, delta.text_fragment)
        parts.append(delta.text_fragment)
    return "".join(parts).strip()
