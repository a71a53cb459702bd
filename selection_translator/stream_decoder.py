"""
Incremental decoding of the two streaming wire formats.

Raw byte chunks are cut into complete lines first; an incomplete trailing
line is held back until the next chunk (or the end of the body) completes
it, so a frame split across two network reads is never lost. Each complete
line is then parsed by a protocol-specific line parser. A line that does not
have the expected shape decodes to nothing and is dropped.
"""

import json

from selection_translator.logging_config import get_logger
from selection_translator.models import Provider, StreamDelta

logger = get_logger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


class LineBuffer:
    """Splits a byte stream on newlines, keeping the unfinished tail."""

    def __init__(self):
        self._pending = b""

    def feed(self, chunk):
        data = self._pending + chunk
        *complete, self._pending = data.split(b"\n")
        return [self._decode(raw) for raw in complete]

    def flush(self):
        """Returns whatever is left once the body has ended."""
        rest, self._pending = self._pending, b""
        return [self._decode(rest)] if rest else []

    @staticmethod
    def _decode(raw):
        # Buffering bytes, not text, keeps multi-byte characters intact
        return raw.decode("utf-8", errors="replace").rstrip("\r")


def parse_generate_line(line):
    """
    Parses one `/api/generate` line: {"response": str, "done": bool}.
    Returns a StreamDelta or None if the line is blank or malformed.
    """
    line = line.strip()
    if not line:
        return None
    try:
        obj = json.loads(line)
    except json.JSONDecodeError:
        return None
    if not isinstance(obj, dict):
        return None

    text = obj.get("response", "")
    done = obj.get("done", False)
    if not isinstance(text, str) or not isinstance(done, bool):
        return None
    if "response" not in obj and not done:
        return None
    return StreamDelta(text, is_final=done)


def parse_chat_line(line):
    """
    Parses one `/v1/chat/completions` event-stream line.
    `data: [DONE]` becomes an empty final delta; comments, blank lines and
    anything without a string `choices[0].delta.content` give None.
    """
    line = line.strip()
    if not line or not line.startswith(DATA_PREFIX):
        return None

    payload = line[len(DATA_PREFIX):].strip()
    if payload == DONE_SENTINEL:
        return StreamDelta("", is_final=True)

    try:
        obj = json.loads(payload)
        content = obj["choices"][0]["delta"].get("content")
    except (json.JSONDecodeError, KeyError, IndexError, TypeError, AttributeError):
        return None

    if not isinstance(content, str):
        return None
    return StreamDelta(content)


LINE_PARSERS = {
    Provider.OLLAMA: parse_generate_line,
    Provider.LMSTUDIO: parse_chat_line,
}


class StreamDecoder:
    """
    Turns raw response chunks into text deltas for one request.

    `feed` and `finish` only return non-empty fragments; the completion
    marker is tracked in `completed` and every line after it is ignored.
    """

    def __init__(self, line_parser):
        self.line_parser = line_parser
        self.completed = False
        self.skipped = 0
        self._lines = LineBuffer()

    @classmethod
    def for_provider(cls, provider):
        return cls(LINE_PARSERS[Provider.from_id(provider)])

    def feed(self, chunk):
        return self._decode_lines(self._lines.feed(chunk))

    def finish(self):
        """Decodes the unterminated last line, if any. The body has ended."""
        deltas = self._decode_lines(self._lines.flush())
        self.completed = True
        return deltas

    def _decode_lines(self, lines):
        deltas = []
        for line in lines:
            if self.completed:
                break
            delta = self.line_parser(line)
            if delta is None:
                if line.strip():
                    self.skipped += 1
                    logger.debug("Skipping undecodable stream line: %r", line[:200])
                continue
            if delta.text_fragment:
                deltas.append(StreamDelta(delta.text_fragment))
            if delta.is_final:
                self.completed = True
        return deltas
