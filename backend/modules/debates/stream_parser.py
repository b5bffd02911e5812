"""
Incremental parser for the live debate stream.

The streaming debate endpoint relays an OpenAI-style chat completion as
Server-Sent Events. The model is asked to write one JSON object per line
(JSONL), so the debate messages only exist inside the concatenation of
all delta tokens. Parsing happens in stages:

    bytes -> LineReassembler -> decode_frame -> DeltaAccumulator
          -> extract_messages -> detect_consensus

DebateStreamParser wires the stages together and keeps the published
message list. Everything here is synchronous and free of I/O; the async
driver lives in stream_adapter.py.
"""

import codecs
import json
import logging
import math
from typing import Any, Optional

from .models import (
    ConsensusEvent,
    DebateMessage,
    StreamFrame,
)

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
CODE_FENCE = "```"


class LineReassembler:
    """
    Splits a byte stream into text lines across arbitrary chunk boundaries.

    Bytes are decoded incrementally, so a multi-byte character split
    between chunks is reassembled. Invalid sequences are replaced rather
    than raising.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._closed = False

    @property
    def pending(self) -> str:
        """Text buffered but not yet returned as a complete line."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[str]:
        """
        Add a chunk and return every complete line now available.

        A trailing partial line is retained for the next call.
        """
        self._buffer += self._decoder.decode(chunk)
        return self._take_lines()

    def push_back(self, lines: list[str]) -> None:
        """Re-buffer lines ahead of any pending text, for reconsideration."""
        if lines:
            self._buffer = "".join(line + "\n" for line in lines) + self._buffer

    def close(self) -> list[str]:
        """
        Signal end of stream and return the remaining lines.

        A non-empty unterminated remainder is returned as an implicit
        final line.
        """
        if not self._closed:
            self._buffer += self._decoder.decode(b"", final=True)
            self._closed = True
        lines = self._take_lines()
        remainder = self._strip_cr(self._buffer)
        self._buffer = ""
        if remainder.strip():
            lines.append(remainder)
        return lines

    def _take_lines(self) -> list[str]:
        lines: list[str] = []
        while (index := self._buffer.find("\n")) != -1:
            lines.append(self._strip_cr(self._buffer[:index]))
            self._buffer = self._buffer[index + 1:]
        return lines

    @staticmethod
    def _strip_cr(line: str) -> str:
        return line[:-1] if line.endswith("\r") else line


def decode_frame(line: str) -> Optional[StreamFrame]:
    """
    Interpret one complete line as an SSE frame.

    Returns None for lines that carry nothing (comments, blank lines and
    non-data fields). A `data: [DONE]` frame is terminal. A data frame
    whose payload is not valid JSON comes back flagged incomplete so the
    caller can wait for more bytes. JSON that no amount of extra bytes
    can fix (integers past the conversion limit, nesting too deep) comes
    back flagged malformed.
    """
    if line.startswith(":") or not line.strip():
        return None
    if not line.startswith(DATA_PREFIX):
        return None

    payload_str = line[len(DATA_PREFIX):].strip()
    if payload_str == DONE_SENTINEL:
        return StreamFrame(raw_line=line, is_terminal=True)

    try:
        payload = json.loads(payload_str)
    except json.JSONDecodeError:
        return StreamFrame(raw_line=line, is_incomplete=True)
    except (ValueError, RecursionError):
        return StreamFrame(raw_line=line, is_malformed=True)

    if not isinstance(payload, dict):
        return StreamFrame(raw_line=line)
    return StreamFrame(raw_line=line, payload=payload)


def extract_delta(payload: Optional[dict[str, Any]]) -> Optional[str]:
    """Return `choices[0].delta.content` if present and non-empty."""
    if not payload:
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None


class DeltaAccumulator:
    """
    Append-only buffer of the model's generated text.

    This is the only writer of the text buffer. It is never trimmed, so
    the message list can be re-derived from it at any point.
    """

    def __init__(self) -> None:
        self._text = ""

    @property
    def text(self) -> str:
        return self._text

    def accept(self, payload: Optional[dict[str, Any]]) -> Optional[str]:
        """Append the payload's delta token, returning it (or None)."""
        token = extract_delta(payload)
        if token is None:
            return None
        self._text += token
        return token


def _as_score(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        score = float(value)
    except OverflowError:
        return None
    return score if math.isfinite(score) else None


def _to_message(record: Any) -> Optional[DebateMessage]:
    if not isinstance(record, dict):
        return None
    speaker = record.get("speaker")
    message = record.get("message")
    if not isinstance(speaker, str) or not speaker:
        return None
    if not isinstance(message, str) or not message:
        return None

    message_type = record.get("type")
    final_score = record.get("final_score")
    return DebateMessage(
        speaker=speaker,
        type=message_type if isinstance(message_type, str) else "",
        message=message,
        final_score=_as_score(final_score),
    )


def extract_messages(text: str) -> list[DebateMessage]:
    """
    Parse every complete JSONL debate record in the accumulated text.

    Lines that fail to parse are records still being streamed in and are
    skipped silently. Records without a speaker and a message are dropped.
    The result depends only on `text`, in source line order.
    """
    messages: list[DebateMessage] = []
    for raw_line in text.split("\n"):
        candidate = raw_line.strip()
        if not candidate or candidate.startswith(CODE_FENCE):
            continue
        try:
            record = json.loads(candidate)
        except (ValueError, RecursionError):
            continue
        message = _to_message(record)
        if message is not None:
            messages.append(message)
    return messages


def detect_consensus(messages: list[DebateMessage]) -> Optional[ConsensusEvent]:
    """
    Return the consensus carried by the last message, if any.

    Only the last message is inspected. It must be of the terminal type
    and carry a finite final score greater than zero. Callers re-run this
    on every list replacement and must de-duplicate the result.
    """
    if not messages:
        return None
    last = messages[-1]
    if not last.is_final:
        return None
    score = last.final_score
    if score is None or not math.isfinite(score) or score <= 0:
        return None
    return ConsensusEvent(score=score, message=last.message)


class DebateStreamParser:
    """
    Drives raw stream bytes through every parsing stage.

    Holds the published message list. A re-parse replaces the list only
    when at least one record parsed and the list would not shrink.

    Malformed data frames are pushed back and retried when more bytes
    arrive. A frame that keeps failing is dropped after
    `max_frame_retries` attempts, or immediately when it is longer than
    `max_pending_frame_bytes`, and counted in `malformed_frames`.
    """

    def __init__(
        self,
        max_frame_retries: int = 3,
        max_pending_frame_bytes: int = 65536,
    ):
        self.max_frame_retries = max_frame_retries
        self.max_pending_frame_bytes = max_pending_frame_bytes

        self.reassembler = LineReassembler()
        self.accumulator = DeltaAccumulator()
        self.messages: list[DebateMessage] = []
        self.done = False
        self.malformed_frames = 0

        self._retry_line: Optional[str] = None
        self._retry_count = 0

    @property
    def full_text(self) -> str:
        return self.accumulator.text

    def feed(self, chunk: bytes) -> bool:
        """
        Process one chunk of the stream.

        Returns:
            True if the published message list was replaced
        """
        if self.done:
            return False
        return self._process(self.reassembler.feed(chunk), final=False)

    def close(self) -> bool:
        """Process whatever is left once the stream has ended."""
        if self.done:
            return False
        return self._process(self.reassembler.close(), final=True)

    def _process(self, lines: list[str], final: bool) -> bool:
        replaced = False
        for index, line in enumerate(lines):
            frame = decode_frame(line)
            if frame is None:
                continue
            if frame.is_terminal:
                self.done = True
                break
            if frame.is_incomplete or frame.is_malformed:
                if (
                    frame.is_incomplete
                    and not final
                    and self._should_retry(line)
                ):
                    self.reassembler.push_back(lines[index:])
                    break
                self.malformed_frames += 1
                logger.warning(
                    "Discarding malformed stream frame (%d bytes)", len(line)
                )
                continue
            if self.accumulator.accept(frame.payload) is not None:
                replaced = self._republish() or replaced
        return replaced

    def _should_retry(self, line: str) -> bool:
        if len(line.encode("utf-8")) > self.max_pending_frame_bytes:
            return False
        if line == self._retry_line:
            self._retry_count += 1
        else:
            self._retry_line = line
            self._retry_count = 1
        logger.debug("Re-buffering incomplete frame (attempt %d)", self._retry_count)
        return self._retry_count <= self.max_frame_retries

    def _republish(self) -> bool:
        messages = extract_messages(self.accumulator.text)
        if not messages or len(messages) < len(self.messages):
            return False
        self.messages = messages
        return True
