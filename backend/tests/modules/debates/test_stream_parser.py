"""Tests for the live debate stream parsing pipeline."""

import json

import pytest

from modules.debates.models import ConsensusEvent, DebateMessage
from modules.debates.stream_parser import (
    DebateStreamParser,
    DeltaAccumulator,
    LineReassembler,
    decode_frame,
    detect_consensus,
    extract_delta,
    extract_messages,
)
from tests.conftest import chunked, jsonl, sse_frame, sse_stream


ALEX_OPEN = {"speaker": "Alex", "type": "open", "message": "Hi"}
MAYA_REPLY = {"speaker": "Maya Patel", "type": "business", "message": "Strong market fit — très bien"}
CONSENSUS = {"speaker": "CONSENSUS", "type": "final", "message": "Score: 8.5", "final_score": 8.5}


def delta_payload(content: str) -> dict:
    return {"choices": [{"delta": {"content": content}}]}


class TestLineReassembler:
    """Tests for splitting bytes into lines."""

    def test_returns_complete_lines_only(self):
        """A trailing partial line should be kept for the next chunk."""
        reassembler = LineReassembler()

        assert reassembler.feed(b"first\nsec") == ["first"]
        assert reassembler.pending == "sec"
        assert reassembler.feed(b"ond\n") == ["second"]
        assert reassembler.pending == ""

    def test_strips_carriage_returns(self):
        """CRLF line endings should yield clean lines."""
        reassembler = LineReassembler()
        assert reassembler.feed(b"one\r\ntwo\r\n") == ["one", "two"]

    def test_keeps_empty_lines(self):
        """Blank lines are returned; the frame decoder ignores them."""
        reassembler = LineReassembler()
        assert reassembler.feed(b"a\n\nb\n") == ["a", "", "b"]

    def test_multibyte_character_split_across_chunks(self):
        """A UTF-8 character split between chunks should be reassembled."""
        reassembler = LineReassembler()
        encoded = "café\n".encode("utf-8")

        assert reassembler.feed(encoded[:4]) == []
        assert reassembler.feed(encoded[4:]) == ["café"]

    def test_invalid_bytes_are_replaced(self):
        """Undecodable bytes should become replacement characters."""
        reassembler = LineReassembler()
        assert reassembler.feed(b"bad\xff\n") == ["bad\ufffd"]

    def test_close_flushes_unterminated_remainder(self):
        """The remainder at end of stream is an implicit final line."""
        reassembler = LineReassembler()
        reassembler.feed(b"line\ntail")

        assert reassembler.close() == ["tail"]
        assert reassembler.pending == ""

    def test_close_ignores_whitespace_remainder(self):
        """A whitespace-only remainder should not produce a line."""
        reassembler = LineReassembler()
        reassembler.feed(b"line\n  ")

        assert reassembler.close() == []

    def test_push_back_precedes_pending_text(self):
        """Pushed-back lines should be returned again before newer data."""
        reassembler = LineReassembler()
        reassembler.feed(b"partial")
        reassembler.push_back(["retry me"])

        assert reassembler.feed(b" done\n") == ["retry me", "partial done"]


class TestDecodeFrame:
    """Tests for SSE frame decoding."""

    @pytest.mark.parametrize("line", ["", "   ", ": keep-alive", "event: message", "id: 4"])
    def test_lines_without_data_are_skipped(self, line):
        """Comments, blank lines and other fields carry nothing."""
        assert decode_frame(line) is None

    def test_done_sentinel_is_terminal(self):
        """`data: [DONE]` should end the stream."""
        frame = decode_frame("data: [DONE]")
        assert frame is not None
        assert frame.is_terminal is True
        assert frame.payload is None

    def test_valid_json_payload(self):
        """A JSON data frame should carry its payload."""
        line = "data: " + json.dumps(delta_payload("hi"))
        frame = decode_frame(line)

        assert frame.payload == delta_payload("hi")
        assert frame.raw_line == line
        assert frame.is_incomplete is False
        assert frame.is_terminal is False

    def test_unparseable_payload_is_incomplete(self):
        """A payload that is not valid JSON should be flagged incomplete."""
        frame = decode_frame('data: {"choices": [{"delta"')
        assert frame.is_incomplete is True
        assert frame.payload is None

    def test_unfixable_payload_is_malformed(self):
        """JSON past the integer digit limit cannot be completed by more bytes."""
        frame = decode_frame('data: {"x": ' + "1" * 5000 + "}")
        assert frame.is_malformed is True
        assert frame.is_incomplete is False
        assert frame.payload is None

    def test_non_object_payload_has_no_payload(self):
        """A JSON value that is not an object contributes nothing."""
        frame = decode_frame("data: [1, 2, 3]")
        assert frame.payload is None
        assert frame.is_incomplete is False


class TestDeltaAccumulator:
    """Tests for delta extraction and accumulation."""

    def test_appends_tokens_in_order(self):
        """Tokens should be appended to the text buffer."""
        accumulator = DeltaAccumulator()

        assert accumulator.accept(delta_payload("Hel")) == "Hel"
        assert accumulator.accept(delta_payload("lo")) == "lo"
        assert accumulator.text == "Hello"

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            {},
            {"choices": []},
            {"choices": ["nope"]},
            {"choices": [{"delta": {"role": "assistant"}}]},
            {"choices": [{"delta": {"content": ""}}]},
            {"choices": [{"delta": {"content": 42}}]},
        ],
    )
    def test_payloads_without_content_are_ignored(self, payload):
        """Frames without a non-empty string delta add nothing."""
        accumulator = DeltaAccumulator()

        assert accumulator.accept(payload) is None
        assert accumulator.text == ""

    def test_extract_delta_reads_first_choice(self):
        """Only the first choice's delta is used."""
        payload = {"choices": [{"delta": {"content": "a"}}, {"delta": {"content": "b"}}]}
        assert extract_delta(payload) == "a"


class TestExtractMessages:
    """Tests for JSONL message extraction."""

    def test_parses_complete_records(self):
        """Each JSON line with speaker and message becomes a message."""
        text = jsonl(ALEX_OPEN) + jsonl(CONSENSUS)
        messages = extract_messages(text)

        assert messages == [
            DebateMessage(speaker="Alex", type="open", message="Hi"),
            DebateMessage(speaker="CONSENSUS", type="final", message="Score: 8.5", final_score=8.5),
        ]

    def test_skips_partial_trailing_line(self):
        """A record still being streamed should be skipped silently."""
        text = jsonl(ALEX_OPEN) + '{"speaker":"Bob","mess'
        assert [m.speaker for m in extract_messages(text)] == ["Alex"]

    def test_skips_code_fences_and_blank_lines(self):
        """Markdown fences around the JSONL should be ignored."""
        text = "```json\n\n" + jsonl(ALEX_OPEN) + "```\n"
        assert len(extract_messages(text)) == 1

    def test_drops_records_missing_required_fields(self):
        """Records without a non-empty speaker and message are dropped."""
        text = (
            jsonl({"speaker": "Alex"})
            + jsonl({"message": "orphan"})
            + jsonl({"speaker": "", "message": "x"})
            + jsonl({"speaker": "Alex", "message": 5})
            + jsonl(["speaker", "message"])
        )
        assert extract_messages(text) == []

    def test_missing_type_defaults_to_empty(self):
        """A record without a type should still be kept."""
        messages = extract_messages(jsonl({"speaker": "Bob", "message": "done"}))
        assert messages[0].type == ""

    @pytest.mark.parametrize("score", ["8.5", True, None, [8]])
    def test_non_numeric_final_score_is_dropped(self, score):
        """Only real numbers are kept as final scores."""
        record = {"speaker": "C", "type": "final", "message": "m", "final_score": score}
        assert extract_messages(jsonl(record))[0].final_score is None

    def test_non_finite_final_score_is_dropped(self):
        """NaN is accepted by the JSON parser but is not a usable score."""
        text = '{"speaker": "C", "type": "final", "message": "m", "final_score": NaN}\n'
        assert extract_messages(text)[0].final_score is None

    def test_integer_final_score_becomes_float(self):
        record = {"speaker": "C", "type": "final", "message": "m", "final_score": 9}
        assert extract_messages(jsonl(record))[0].final_score == 9.0

    def test_final_score_too_large_for_float_is_dropped(self):
        """An integer that overflows a float is not a usable score."""
        text = '{"speaker": "C", "type": "final", "message": "m", "final_score": ' + "9" * 400 + "}\n"
        messages = extract_messages(text)

        assert len(messages) == 1
        assert messages[0].final_score is None
        assert detect_consensus(messages) is None

    def test_integer_past_digit_limit_skips_record(self):
        """A record the JSON parser refuses is skipped, not raised."""
        text = '{"speaker": "X", "message": "m", "n": ' + "1" * 5000 + "}\n" + jsonl(ALEX_OPEN)
        assert [m.speaker for m in extract_messages(text)] == ["Alex"]

    def test_extraction_is_idempotent(self):
        """The same buffer should always yield the same list."""
        text = jsonl(ALEX_OPEN) + jsonl(MAYA_REPLY) + '{"speaker":"x"'
        assert extract_messages(text) == extract_messages(text)


class TestDetectConsensus:
    """Tests for consensus detection."""

    def test_detects_final_message(self):
        messages = extract_messages(jsonl(ALEX_OPEN) + jsonl(CONSENSUS))
        assert detect_consensus(messages) == ConsensusEvent(score=8.5, message="Score: 8.5")

    def test_uses_message_final_flag(self):
        """The detector and DebateMessage.is_final agree on the terminal type."""
        final = DebateMessage(speaker="C", type="final", message="Agreed", final_score=7.0)
        closing = DebateMessage(speaker="C", type="closing", message="Agreed", final_score=7.0)

        assert final.is_final is True
        assert closing.is_final is False
        assert detect_consensus([final]) == ConsensusEvent(score=7.0, message="Agreed")
        assert detect_consensus([closing]) is None

    def test_empty_list_has_no_consensus(self):
        assert detect_consensus([]) is None

    def test_only_last_message_is_considered(self):
        """A final message followed by another message is not a consensus."""
        messages = extract_messages(jsonl(CONSENSUS) + jsonl(ALEX_OPEN))
        assert detect_consensus(messages) is None

    @pytest.mark.parametrize("score", [0, -1])
    def test_non_positive_score_is_ignored(self, score):
        record = dict(CONSENSUS, final_score=score)
        assert detect_consensus(extract_messages(jsonl(record))) is None

    def test_final_type_without_score_is_ignored(self):
        record = {"speaker": "CONSENSUS", "type": "final", "message": "No agreement"}
        assert detect_consensus(extract_messages(jsonl(record))) is None

    def test_score_on_non_final_message_is_ignored(self):
        record = dict(ALEX_OPEN, final_score=7.0)
        assert detect_consensus(extract_messages(jsonl(record))) is None


class TestDebateStreamParser:
    """Tests for the full bytes-to-messages pipeline."""

    def test_single_message_then_done(self):
        """Two frames: one message, then the terminal frame."""
        parser = DebateStreamParser()

        replaced = parser.feed(sse_stream(jsonl(ALEX_OPEN)))

        assert replaced is True
        assert parser.messages == [DebateMessage(speaker="Alex", type="open", message="Hi")]
        assert parser.done is True
        assert detect_consensus(parser.messages) is None

    def test_consensus_frame(self):
        """A final record should produce a consensus."""
        parser = DebateStreamParser()
        parser.feed(sse_stream(jsonl(ALEX_OPEN), jsonl(CONSENSUS)))

        assert detect_consensus(parser.messages) == ConsensusEvent(score=8.5, message="Score: 8.5")

    def test_record_split_across_tokens(self):
        """A record split across deltas appears once it is complete."""
        parser = DebateStreamParser()

        assert parser.feed(sse_frame('{"speaker":"Bob","type":"risk","mess').encode()) is False
        assert parser.messages == []

        assert parser.feed(sse_frame('age":"done"}\n').encode()) is True
        assert parser.messages == [DebateMessage(speaker="Bob", type="risk", message="done")]

    @pytest.mark.parametrize("size", [1, 2, 3, 5, 7, 16, 64])
    def test_chunk_boundaries_do_not_change_result(self, size):
        """Any chunking of the same stream should give the same messages."""
        body = sse_stream(
            jsonl(ALEX_OPEN)[:10],
            jsonl(ALEX_OPEN)[10:],
            jsonl(MAYA_REPLY),
            jsonl(CONSENSUS),
        )
        whole = DebateStreamParser()
        whole.feed(body)
        whole.close()

        parser = DebateStreamParser()
        for chunk in chunked(body, size):
            parser.feed(chunk)
        parser.close()

        assert parser.messages == whole.messages
        assert len(parser.messages) == 3
        assert parser.full_text == whole.full_text

    def test_published_list_never_shrinks(self):
        """A re-parse with fewer messages should not be published."""
        parser = DebateStreamParser()
        parser.feed(sse_frame('{"speaker":"A","message":"x"}').encode())
        assert len(parser.messages) == 1

        # The same line now fails to parse
        assert parser.feed(sse_frame("garbage").encode()) is False
        assert len(parser.messages) == 1

    def test_text_buffer_is_append_only(self):
        parser = DebateStreamParser()
        parser.feed(sse_frame("one ").encode())
        parser.feed(sse_frame("two").encode())
        assert parser.full_text == "one two"

    def test_ignores_data_after_done(self):
        """Nothing after the terminal frame is processed."""
        parser = DebateStreamParser()
        parser.feed(sse_stream(jsonl(ALEX_OPEN)))

        assert parser.feed(sse_frame(jsonl(MAYA_REPLY)).encode()) is False
        assert parser.close() is False
        assert len(parser.messages) == 1

    def test_close_processes_unterminated_final_frame(self):
        """A last frame without a newline is handled at end of stream."""
        parser = DebateStreamParser()
        frame = sse_frame(jsonl(ALEX_OPEN)).rstrip("\n")

        assert parser.feed(frame.encode()) is False
        assert parser.close() is True
        assert len(parser.messages) == 1

    def test_malformed_frame_is_retried_then_dropped(self):
        """A corrupt frame holds later frames back until it is discarded."""
        parser = DebateStreamParser(max_frame_retries=3)

        parser.feed(b"data: {corrupt\n")
        parser.feed(sse_frame(jsonl(ALEX_OPEN)).encode())
        parser.feed(sse_frame(jsonl(MAYA_REPLY)).encode())
        assert parser.messages == []
        assert parser.malformed_frames == 0

        parser.feed(sse_frame(jsonl(CONSENSUS)).encode())

        assert parser.malformed_frames == 1
        assert [m.speaker for m in parser.messages] == ["Alex", "Maya Patel", "CONSENSUS"]

    def test_oversized_malformed_frame_is_dropped_immediately(self):
        parser = DebateStreamParser(max_pending_frame_bytes=16)

        parser.feed(b"data: {this is not json at all\n")

        assert parser.malformed_frames == 1
        assert parser.reassembler.pending == ""

    def test_malformed_frame_at_end_of_stream_is_dropped(self):
        parser = DebateStreamParser()
        parser.feed(sse_frame(jsonl(ALEX_OPEN)).encode() + b"data: {corrupt\n")

        parser.close()

        assert parser.malformed_frames == 1
        assert len(parser.messages) == 1

    def test_unfixable_frame_is_dropped_without_holding_later_frames(self):
        """Frames that can never parse are discarded on sight."""
        parser = DebateStreamParser()
        bad = b'data: {"x": ' + b"1" * 5000 + b"}\n"

        assert parser.feed(bad + sse_frame(jsonl(ALEX_OPEN)).encode()) is True

        assert parser.malformed_frames == 1
        assert [m.speaker for m in parser.messages] == ["Alex"]
        assert parser.reassembler.pending == ""
