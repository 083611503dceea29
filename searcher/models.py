"""검색 컨트롤러 명령/상태 모델"""

from dataclasses import dataclass, field
from typing import Optional

from catalog.models import CharacterRecord, QuerySpec


@dataclass(frozen=True)
class Search:
    """새 검색 (페이지는 1로 초기화)"""

    term: str = ""
    include_tags: tuple[str, ...] = ()
    exclude_tags: tuple[str, ...] = ()
    nsfw: Optional[bool] = None
    sort: str = ""


@dataclass(frozen=True)
class NextPage:
    pass


@dataclass(frozen=True)
class PrevPage:
    pass


@dataclass(frozen=True)
class SetPage:
    page: int


@dataclass(frozen=True)
class ToggleTag:
    """태그 원문 값으로 포함 태그 토글"""

    value: str


@dataclass(frozen=True)
class SetTranslation:
    enabled: bool


Command = Search | NextPage | PrevPage | SetPage | ToggleTag | SetTranslation


@dataclass
class SearchState:
    """컨트롤러가 소유하는 현재 검색 상태"""

    query: QuerySpec = field(default_factory=QuerySpec)
    results: list[CharacterRecord] = field(default_factory=list)
    generation: int = 0  # 마지막으로 시작한 검색
    completed_generation: int = 0  # 마지막으로 반영한 검색
    searching: bool = False
