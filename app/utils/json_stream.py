"""스트리밍 JSON 배열 디코더

모델이 토큰 단위로 내보내는 JSON 배열 텍스트를 조금씩 받아,
원소(객체)가 닫히는 순간 파싱/검증해서 돌려준다.

상태: awaiting_array_start -> awaiting_element -> inside_element
      -> awaiting_separator_or_end -> (awaiting_element | done)
"""
import json
import re
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

_WHITESPACE = " \t\r\n"
_ERROR_ENVELOPE_START = re.compile(r'\{\s*"error"\s*:')


class DecoderState(str, Enum):
    AWAITING_ARRAY_START = "awaiting_array_start"
    AWAITING_ELEMENT = "awaiting_element"
    INSIDE_ELEMENT = "inside_element"
    AWAITING_SEPARATOR_OR_END = "awaiting_separator_or_end"
    DONE = "done"


class JsonStreamError(ValueError):
    """스트림이 JSON 배열 형식을 벗어남"""


class JsonArrayStreamDecoder(Generic[T]):
    """객체 원소로 이루어진 JSON 배열을 점진적으로 디코딩

    element_validator가 주어지면 닫힌 원소마다 호출하고, 예외 없이
    통과한 원소만 feed()의 반환값과 accepted에 추가한다.
    """

    def __init__(self, element_validator: Callable[[Any], T] | None = None):
        self._validate = element_validator
        self.state = DecoderState.AWAITING_ARRAY_START
        self.elements: list[Any] = []
        self.accepted: list[T] = []
        self.rejected: list[tuple[int, Exception]] = []
        self.trailing = ""

        self._element_chars: list[str] = []
        self._depth = 0
        self._in_string = False
        self._escaped = False
        self._after_separator = False

    @property
    def is_done(self) -> bool:
        return self.state is DecoderState.DONE

    @property
    def pending_text(self) -> str:
        """아직 닫히지 않은 원소의 텍스트"""
        return "".join(self._element_chars)

    def feed(self, text: str) -> list[T]:
        """텍스트 조각을 처리하고 새로 완성된 원소 목록을 반환"""
        completed: list[T] = []
        for ch in text:
            state = self.state

            if state is DecoderState.INSIDE_ELEMENT:
                self._consume_element_char(ch, completed)
            elif state is DecoderState.DONE:
                self.trailing += ch
            elif ch in _WHITESPACE:
                continue
            elif state is DecoderState.AWAITING_ARRAY_START:
                if ch != "[":
                    raise JsonStreamError(f"expected '[' at start of stream, got {ch!r}")
                self.state = DecoderState.AWAITING_ELEMENT
            elif state is DecoderState.AWAITING_ELEMENT:
                if ch == "{":
                    self._start_element(ch)
                elif ch == "]" and not self._after_separator:
                    self.state = DecoderState.DONE
                else:
                    raise JsonStreamError(f"expected an object element, got {ch!r}")
            elif state is DecoderState.AWAITING_SEPARATOR_OR_END:
                if ch == ",":
                    self._after_separator = True
                    self.state = DecoderState.AWAITING_ELEMENT
                elif ch == "]":
                    self.state = DecoderState.DONE
                else:
                    raise JsonStreamError(f"expected ',' or ']' after element, got {ch!r}")
        return completed

    def finish(self) -> list[Any]:
        """스트림 종료 시 호출. 닫힌 배열의 원소(파싱된 JSON) 전체를 반환"""
        if self.state is not DecoderState.DONE:
            raise JsonStreamError(f"stream ended in state {self.state.value}")
        if self.trailing.strip():
            raise JsonStreamError("unexpected content after the closing bracket")
        return list(self.elements)

    def _start_element(self, ch: str) -> None:
        self.state = DecoderState.INSIDE_ELEMENT
        self._element_chars = [ch]
        self._depth = 1
        self._in_string = False
        self._escaped = False

    def _consume_element_char(self, ch: str, completed: list[T]) -> None:
        self._element_chars.append(ch)

        if self._in_string:
            if self._escaped:
                self._escaped = False
            elif ch == "\\":
                self._escaped = True
            elif ch == '"':
                self._in_string = False
            return

        if ch == '"':
            self._in_string = True
        elif ch in "{[":
            self._depth += 1
        elif ch in "}]":
            self._depth -= 1
            if self._depth == 0:
                self._close_element(completed)

    def _close_element(self, completed: list[T]) -> None:
        raw = "".join(self._element_chars)
        self._element_chars = []
        self._after_separator = False
        self.state = DecoderState.AWAITING_SEPARATOR_OR_END

        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            raise JsonStreamError(f"element {len(self.elements)} is not valid JSON: {e}") from e

        index = len(self.elements)
        self.elements.append(value)

        if self._validate is None:
            self.accepted.append(value)
            completed.append(value)
            return
        try:
            item = self._validate(value)
        except ValueError as e:
            self.rejected.append((index, e))
            return
        self.accepted.append(item)
        completed.append(item)


def find_error_envelope(text: str) -> str | None:
    """스트림 끝에 붙은 {"error": "..."} 메시지를 찾는다 (없으면 None)"""
    decoder = json.JSONDecoder()
    for match in reversed(list(_ERROR_ENVELOPE_START.finditer(text))):
        try:
            value, end = decoder.raw_decode(text, match.start())
        except json.JSONDecodeError:
            continue
        if text[end:].strip():
            continue
        if isinstance(value, dict) and set(value) == {"error"} and isinstance(value["error"], str):
            return value["error"]
    return None
