"""난이도/언어 정책

난이도별 문제 수 범위와 생성 temperature, 언어 코드별 표시 이름을 정의한다.
모든 함수는 순수 함수이며, 알 수 없는 값은 기본값(normal / english)으로 대체한다.
"""
import random
from enum import Enum
from typing import Any


class Difficulty(str, Enum):
    easy = "easy"
    normal = "normal"
    hard = "hard"


class Language(str, Enum):
    english = "english"
    arabic = "arabic"
    spanish = "spanish"
    french = "french"
    german = "german"
    chinese = "chinese"


DEFAULT_DIFFICULTY = Difficulty.normal
DEFAULT_LANGUAGE = Language.english

QUESTION_COUNT_RANGES: dict[Difficulty, tuple[int, int]] = {
    Difficulty.easy: (5, 10),
    Difficulty.normal: (10, 20),
    Difficulty.hard: (20, 30),
}

GENERATION_TEMPERATURES: dict[Difficulty, float] = {
    Difficulty.easy: 0.3,
    Difficulty.normal: 0.5,
    Difficulty.hard: 0.7,
}

LANGUAGE_NAMES: dict[Language, str] = {
    Language.english: "English",
    Language.arabic: "Arabic",
    Language.spanish: "Spanish",
    Language.french: "French",
    Language.german: "German",
    Language.chinese: "Chinese",
}


def resolve_difficulty(value: Any) -> Difficulty:
    """난이도 값 해석 (정확히 일치하지 않으면 normal)"""
    if isinstance(value, Difficulty):
        return value
    if isinstance(value, str):
        try:
            return Difficulty(value)
        except ValueError:
            pass
    return DEFAULT_DIFFICULTY


def resolve_language(value: Any) -> Language:
    """언어 코드 해석 (정확히 일치하지 않으면 english)"""
    if isinstance(value, Language):
        return value
    if isinstance(value, str):
        try:
            return Language(value)
        except ValueError:
            pass
    return DEFAULT_LANGUAGE


def question_count_range(difficulty: Any) -> tuple[int, int]:
    return QUESTION_COUNT_RANGES[resolve_difficulty(difficulty)]


def resolve_language_name(code: Any) -> str:
    return LANGUAGE_NAMES[resolve_language(code)]


def generation_temperature(difficulty: Any) -> float:
    return GENERATION_TEMPERATURES[resolve_difficulty(difficulty)]


def pick_question_count(difficulty: Any, rng: random.Random | None = None) -> int:
    """요청당 한 번, [min, max] 범위에서 균등 추출한 목표 문제 수"""
    low, high = question_count_range(difficulty)
    return (rng or random).randint(low, high)


def expected_question_count(difficulty: Any) -> int:
    """진행률 표시에 쓰는 평균 문제 수 (올림)"""
    low, high = question_count_range(difficulty)
    return (low + high + 1) // 2
