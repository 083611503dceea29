"""검색 모듈"""

from .orchestrator import SearchOrchestrator
from .controller import SearchController
from .models import (
    Search,
    NextPage,
    PrevPage,
    SetPage,
    ToggleTag,
    SetTranslation,
    SearchState,
)

__all__ = [
    "SearchOrchestrator",
    "SearchController",
    "Search",
    "NextPage",
    "PrevPage",
    "SetPage",
    "ToggleTag",
    "SetTranslation",
    "SearchState",
]
