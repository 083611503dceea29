"""문자(script) 감지"""

import re
from typing import Callable

ScriptDetector = Callable[[str], bool]

CJK_PATTERN = re.compile(r"[一-鿿]")
HANGUL_PATTERN = re.compile(r"[가-힣]")
KANA_PATTERN = re.compile(r"[぀-ヿ]")


def contains_cjk(text: str) -> bool:
    """한자(CJK 통합 한자)가 포함되어 있는지"""
    return bool(text) and CJK_PATTERN.search(text) is not None


def contains_hangul(text: str) -> bool:
    return bool(text) and HANGUL_PATTERN.search(text) is not None


def contains_kana(text: str) -> bool:
    return bool(text) and KANA_PATTERN.search(text) is not None


# 언어 코드 앞부분 -> 감지 함수
DETECTORS: dict[str, ScriptDetector] = {
    "zh": contains_cjk,
    "ko": contains_hangul,
    "ja": contains_kana,
}


def detector_for(language: str) -> ScriptDetector:
    """대상 언어의 문자가 이미 들어 있는지 판단하는 함수 (기본: 한자)"""
    prefix = (language or "").split("-")[0].lower()
    return DETECTORS.get(prefix, contains_cjk)
