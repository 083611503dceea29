from typing import Iterable

from bs4 import BeautifulSoup


def strip_markup(text: str) -> str:
    """HTML/마크업 제거 후 공백 정리

    "<p>Hello <b>world</b></p>" -> "Hello world"
    """
    if not text:
        return ""
    plain = BeautifulSoup(text, "html.parser").get_text(" ")
    return " ".join(plain.split())


def dedupe_tags(tags: Iterable[str]) -> list[str]:
    """레코드 내 중복 태그 제거 (공백/대소문자 정규화 기준, 첫 항목 유지)"""
    seen = set()
    result = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        tag = tag.strip()
        key = tag.casefold()
        if not tag or key in seen:
            continue
        seen.add(key)
        result.append(tag)
    return result


def author_from_path(full_path: str) -> str:
    """fullPath 첫 구간 (작성자명)"""
    return full_path.split("/")[0] if full_path else ""
