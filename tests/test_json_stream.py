"""스트리밍 JSON 배열 디코더 테스트"""
import json

import pytest

from app.schemas.quiz import validate_question
from app.utils.json_stream import (
    DecoderState,
    JsonArrayStreamDecoder,
    JsonStreamError,
    find_error_envelope,
)

from fakes import make_question, questions_json, split_text


def test_decoder_states():
    """상태 전이: 배열 시작 -> 원소 -> 구분자 -> 종료"""
    decoder = JsonArrayStreamDecoder()
    assert decoder.state is DecoderState.AWAITING_ARRAY_START

    decoder.feed("  [")
    assert decoder.state is DecoderState.AWAITING_ELEMENT

    decoder.feed('{"a": 1')
    assert decoder.state is DecoderState.INSIDE_ELEMENT
    assert decoder.pending_text == '{"a": 1'

    assert decoder.feed("}") == [{"a": 1}]
    assert decoder.state is DecoderState.AWAITING_SEPARATOR_OR_END

    decoder.feed(" ,")
    assert decoder.state is DecoderState.AWAITING_ELEMENT

    decoder.feed('{"b": 2}\n]')
    assert decoder.is_done
    assert decoder.finish() == [{"a": 1}, {"b": 2}]


@pytest.mark.parametrize("chunk_size", [1, 2, 7, 64, 10_000])
def test_decoder_chunk_boundaries(chunk_size):
    """청크 경계와 무관하게 같은 결과"""
    text = questions_json(6)
    decoder = JsonArrayStreamDecoder(validate_question)

    received = []
    for chunk in split_text(text, chunk_size):
        received.extend(decoder.feed(chunk))

    assert [q.question for q in received] == [f"Question {i}?" for i in range(6)]
    assert decoder.finish() == json.loads(text)


def test_decoder_emits_element_when_closed():
    """원소가 닫히는 순간 반환"""
    text = questions_json(2)
    first_end = text.index("}") + 1
    decoder = JsonArrayStreamDecoder(validate_question)

    assert decoder.feed(text[:first_end - 1]) == []
    emitted = decoder.feed(text[first_end - 1:first_end])

    assert len(emitted) == 1
    assert emitted[0].question == "Question 0?"


def test_decoder_handles_braces_and_escapes_in_strings():
    """문자열 안의 괄호/따옴표/이스케이프는 구조로 보지 않음"""
    tricky = {
        "question": 'What does "{[}]" mean in \\"JSON\\"?',
        "options": ["}", "]", "{", '\\"'],
        "answer": "B",
    }
    text = json.dumps([tricky, make_question(1)], ensure_ascii=False)
    decoder = JsonArrayStreamDecoder(validate_question)

    received = []
    for ch in text:
        received.extend(decoder.feed(ch))

    assert len(received) == 2
    assert received[0].options == ("}", "]", "{", '\\"')


def test_decoder_handles_unicode_text():
    data = [{"question": "ما هو الخلية؟", "options": ["أ", "ب", "ج", "د"], "answer": "A"}]
    decoder = JsonArrayStreamDecoder(validate_question)

    received = decoder.feed(json.dumps(data, ensure_ascii=False))

    assert decoder.is_done
    assert received[0].question == "ما هو الخلية؟"


def test_decoder_records_invalid_elements():
    """스키마에 맞지 않는 원소는 노출하지 않고 rejected에 기록"""
    bad = make_question(1)
    bad["options"] = ["only", "three", "options"]
    text = json.dumps([make_question(0), bad, make_question(2)])
    decoder = JsonArrayStreamDecoder(validate_question)

    received = decoder.feed(text)

    assert [q.question for q in received] == ["Question 0?", "Question 2?"]
    assert [index for index, _ in decoder.rejected] == [1]
    assert len(decoder.finish()) == 3


def test_decoder_empty_array():
    decoder = JsonArrayStreamDecoder()
    decoder.feed("[ ]")

    assert decoder.finish() == []


@pytest.mark.parametrize(
    "text",
    [
        '{"error": "boom"}',
        "[1, 2]",
        '[{"a": 1} {"b": 2}]',
        '[{"a": 1},]',
        "[,",
        "hello",
    ],
)
def test_decoder_rejects_malformed_stream(text):
    decoder = JsonArrayStreamDecoder()

    with pytest.raises(JsonStreamError):
        decoder.feed(text)


def test_decoder_rejects_invalid_element_json():
    decoder = JsonArrayStreamDecoder()

    with pytest.raises(JsonStreamError):
        decoder.feed('[{"a": tru}]')


def test_decoder_finish_before_array_closed():
    """배열이 닫히기 전 종료는 오류"""
    decoder = JsonArrayStreamDecoder()
    decoder.feed('[{"a": 1}, {"b"')

    with pytest.raises(JsonStreamError):
        decoder.finish()


def test_decoder_finish_with_trailing_content():
    decoder = JsonArrayStreamDecoder()
    decoder.feed('[{"a": 1}]{"error": "late failure"}')

    assert decoder.trailing == '{"error": "late failure"}'
    with pytest.raises(JsonStreamError):
        decoder.finish()


@pytest.mark.parametrize(
    "text",
    [
        '{"error": "boom"}',
        '[{"question": "Q1?", "opt{"error": "boom"}',
        questions_json(2) + '{"error": "boom"}',
        '[{"question": "Q1?"}, {"error": "boom"}\n',
    ],
)
def test_find_error_envelope(text):
    """스트림 끝의 오류 envelope 탐지"""
    assert find_error_envelope(text) == "boom"


@pytest.mark.parametrize(
    "text",
    [
        questions_json(2),
        "",
        '{"error": "boom"} trailing',
        '{"error": 3}',
        '{"error": "boom", "extra": true}',
        '[{"question": "{\\"error\\": \\"x\\"}", "options": []}]',
    ],
)
def test_find_error_envelope_absent(text):
    assert find_error_envelope(text) is None
