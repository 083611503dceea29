"""검색 컨트롤러 (명령 -> 디바운스 -> 검색, 세대 번호로 오래된 응답 폐기)"""

import asyncio
import logging
from typing import Callable, Optional, Union

from catalog.models import CharacterRecord, QuerySpec, Tag, tag_value

from .models import (
    Command,
    NextPage,
    PrevPage,
    Search,
    SearchState,
    SetPage,
    SetTranslation,
    ToggleTag,
)
from .orchestrator import SearchOrchestrator

logger = logging.getLogger(__name__)


class SearchController:
    """현재 검색 상태의 유일한 소유자

    모든 상태 변경은 단일 이벤트 루프에서 await 경계 사이에 일어난다.
    """

    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        debounce_seconds: Optional[float] = None,
        on_results: Optional[Callable[[list[CharacterRecord]], None]] = None,
    ):
        self.orchestrator = orchestrator
        if debounce_seconds is None:
            debounce_seconds = orchestrator.settings.debounce_seconds
        self.debounce_seconds = debounce_seconds
        self.on_results = on_results
        self.state = SearchState()
        self._timer: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def results(self) -> list[CharacterRecord]:
        return self.state.results

    @property
    def query(self) -> QuerySpec:
        return self.state.query

    def is_selected(self, tag: Union[Tag, str]) -> bool:
        """태그가 현재 포함 태그에 들어 있는지 (원문 값 기준)"""
        return tag_value(tag) in self.state.query.include_tags

    def _with(self, **update) -> QuerySpec:
        return QuerySpec.model_validate({**self.state.query.model_dump(), **update})

    def apply(self, command: Command) -> Optional[QuerySpec]:
        """명령을 다음 검색 쿼리로 변환 (검색이 필요 없으면 None)"""
        query = self.state.query
        if isinstance(command, Search):
            return QuerySpec(
                term=command.term,
                include_tags=command.include_tags,
                exclude_tags=command.exclude_tags,
                nsfw=command.nsfw,
                sort=command.sort,
                page=1,
            )
        if isinstance(command, NextPage):
            return self._with(page=query.page + 1)
        if isinstance(command, PrevPage):
            return self._with(page=query.page - 1)
        if isinstance(command, SetPage):
            return self._with(page=command.page)
        if isinstance(command, ToggleTag):
            tags = list(query.include_tags)
            if command.value in tags:
                tags = [t for t in tags if t != command.value]
            else:
                tags.append(command.value)
            return self._with(include_tags=tags, page=1)
        if isinstance(command, SetTranslation):
            self.orchestrator.set_translation(command.enabled)
            return None
        raise TypeError(f"Unknown command: {command!r}")

    def dispatch(self, command: Command):
        """명령 처리. 디바운스 시간 안에 들어온 명령은 마지막 것만 검색"""
        query = self.apply(command)
        if query is None:
            return
        self.state.query = query

        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.create_task(self._debounced(query))

    async def _debounced(self, query: QuerySpec):
        await asyncio.sleep(self.debounce_seconds)
        self._start(query)

    def _start(self, query: QuerySpec) -> asyncio.Task:
        self.state.generation += 1
        self.state.results = []
        self.state.searching = True
        task = asyncio.create_task(self._run(query, self.state.generation))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _run(self, query: QuerySpec, generation: int) -> bool:
        try:
            results = await self.orchestrator.search(query)
        finally:
            if generation == self.state.generation:
                self.state.searching = False

        if generation != self.state.generation:
            logger.debug(f"Discarding stale results (generation {generation} < {self.state.generation})")
            return False

        self.state.results = results
        self.state.completed_generation = generation
        if not results:
            logger.info("No characters found")
        if self.on_results:
            self.on_results(results)
        return True

    async def search_now(self, query: QuerySpec) -> list[CharacterRecord]:
        """디바운스 없이 즉시 검색"""
        self.state.query = query
        await self._start(query)
        return self.state.results

    async def wait_idle(self):
        """대기 중인 디바운스 타이머와 진행 중인 검색이 끝날 때까지 대기"""
        if self._timer is not None:
            await self._timer
        while self._inflight:
            await asyncio.gather(*list(self._inflight))
