from dataclasses import dataclass, field
from typing import ClassVar, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, field_validator

T = TypeVar("T")

DEFAULT_DESCRIPTION = "Description here..."


@dataclass(frozen=True)
class Ok(Generic[T]):
    """외부 호출 성공"""

    value: T
    degraded: ClassVar[bool] = False


@dataclass(frozen=True)
class Degraded(Generic[T]):
    """외부 호출 실패 - 대체값(빈 목록, 원문 매핑 등)으로 진행"""

    value: T
    reason: str = ""
    degraded: ClassVar[bool] = True


Outcome = Union[Ok[T], Degraded[T]]


def _clean_tags(value) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    return tuple(t.strip() for t in value if t and t.strip())


def to_count(value) -> int:
    """통계 값 -> 정수 (해석 불가하면 0)"""
    if isinstance(value, bool):
        return int(value)
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def to_number(value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0  # NaN


class QuerySpec(BaseModel):
    """검색 요청 (호출마다 새로 생성)"""

    model_config = ConfigDict(frozen=True)

    term: str = ""  # 어떤 문자(script)든 가능
    include_tags: tuple[str, ...] = ()
    exclude_tags: tuple[str, ...] = ()
    nsfw: Optional[bool] = None  # None이면 설정값 사용
    sort: str = ""  # 제공자별 정렬 키
    page: int = 1

    @field_validator("include_tags", "exclude_tags", mode="before")
    @classmethod
    def _trim_tags(cls, value):
        return _clean_tags(value)

    @field_validator("page", mode="before")
    @classmethod
    def _clamp_page(cls, value):
        try:
            return max(1, int(value))
        except (TypeError, ValueError):
            return 1

    @field_validator("term", mode="before")
    @classmethod
    def _strip_term(cls, value):
        return (value or "").strip()


@dataclass(frozen=True)
class Tag:
    """번역 파이프라인을 거친 태그

    같은 태그 여부는 original_value로만 판단한다 (대소문자 구분).
    display_text는 표시용이며 다른 문자로 번역되어 있을 수 있다.
    """

    original_value: str
    display_text: str = field(default="", compare=False)
    was_translated: bool = field(default=False, compare=False)

    def __post_init__(self):
        if not self.display_text:
            object.__setattr__(self, "display_text", self.original_value)


def tag_value(tag: Union[str, Tag]) -> str:
    """매칭용 태그 값 (항상 원문)"""
    return tag.original_value if isinstance(tag, Tag) else tag


def tag_text(tag: Union[str, Tag]) -> str:
    """표시용 태그 텍스트"""
    return tag.display_text if isinstance(tag, Tag) else tag


PAGE_URLS = {
    "chub": "https://chub.ai/characters/{path}",
    "janitor": "https://janitorai.com/characters/{path}",
}


class CharacterRecord(BaseModel):
    """정규화된 캐릭터 레코드 (검색 결과 1건)"""

    provider: str
    path: str  # 제공자 내 고유 경로/ID
    name: str = ""
    description: str = DEFAULT_DESCRIPTION
    tags: list[Union[Tag, str]] = []
    author: str = ""

    # 통계
    rating: float = 0.0  # 0~5
    rating_count: int = 0
    star_count: int = 0
    fork_count: int = 0
    token_count: int = 0
    chat_count: int = 0
    message_count: int = 0
    has_star_count: bool = True  # 별/북마크 개념이 없는 제공자는 False

    created_at: Optional[str] = None
    last_activity_at: Optional[str] = None

    avatar_url: str = ""
    max_res_url: str = ""
    card: Optional[bytes] = None  # 다운로드한 카드/이미지 원본

    verified: bool = False
    recommended: bool = False
    nsfw_image: bool = False
    has_gallery: bool = False

    # 원문 (툴팁/검색용, 번역이 꺼져 있어도 항상 채움)
    original_name: str = ""
    original_description: str = ""
    original_tags: list[str] = []
    name_translated: bool = False
    description_translated: bool = False

    @property
    def page_url(self) -> str:
        template = PAGE_URLS.get(self.provider)
        return template.format(path=self.path) if template and self.path else ""

    def tag_values(self) -> list[str]:
        return [tag_value(t) for t in self.tags]


@dataclass
class RawItem:
    """제공자 원본 항목 (느슨한 필드 맵 + 선택적 카드 데이터)"""

    provider: str
    fields: dict
    card: Optional[bytes] = None


class ChubNode(BaseModel):
    """Chub 검색 응답의 node"""

    fullPath: str
    name: Optional[str] = ""
    tagline: Optional[str] = ""
    description: Optional[str] = ""
    topics: Optional[list[str]] = []
    starCount: Optional[int] = 0
    rating: Optional[float] = 0
    ratingCount: Optional[int] = 0
    nTokens: Optional[int] = 0
    forksCount: Optional[int] = 0
    nChats: Optional[int] = 0
    nMessages: Optional[int] = 0
    createdAt: Optional[str] = None
    lastActivityAt: Optional[str] = None
    avatar_url: Optional[str] = ""
    max_res_url: Optional[str] = ""
    verified: Optional[bool] = False
    recommended: Optional[bool] = False
    nsfw_image: Optional[bool] = False
    hasGallery: Optional[bool] = False

    @field_validator("starCount", "ratingCount", "nTokens", "forksCount", "nChats", "nMessages", mode="before")
    @classmethod
    def _coerce_count(cls, value):
        return to_count(value)

    @field_validator("rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value):
        return to_number(value)


class JanitorTag(BaseModel):
    """JanitorAI 구조화 태그"""

    id: Optional[int] = None
    name: Optional[str] = ""
    label: Optional[str] = ""
    slug: Optional[str] = ""

    @property
    def value(self) -> str:
        return (self.label or self.name or self.slug or "").strip()


class JanitorItem(BaseModel):
    """JanitorAI 캐릭터 목록 항목 (스크랩 프록시 경유)"""

    id: str = ""  # 없으면 페이지 링크 없음
    name: Optional[str] = ""
    description: Optional[str] = ""  # HTML
    tags: Optional[list[JanitorTag]] = []
    custom_tags: Optional[list[str]] = []
    total_chat: Optional[int] = 0
    total_message: Optional[int] = 0
    is_nsfw: Optional[bool] = False
    avatar: Optional[str] = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    creator_name: Optional[str] = ""
    creator_verified: Optional[bool] = False
    token_counts: Optional[dict] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value):
        return str(value) if value is not None else ""

    @field_validator("total_chat", "total_message", mode="before")
    @classmethod
    def _coerce_count(cls, value):
        return to_count(value)

    @field_validator("token_counts", mode="before")
    @classmethod
    def _dict_only(cls, value):
        return value if isinstance(value, dict) else None
