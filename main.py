import asyncio
import argparse
import logging
import math
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def split_tags(value: str) -> list[str]:
    """쉼표로 구분된 태그 입력 -> 목록"""
    return [t.strip() for t in (value or "").split(",") if t.strip()]


def format_record(record, index: int, selected=()) -> str:
    """검색 결과 1건을 출력용 문자열로 변환"""
    from catalog.models import tag_text, tag_value

    if record.rating:
        filled = min(5, math.floor(record.rating))
        stars = "★" * filled + "☆" * (5 - filled)
    else:
        stars = ""
    rating = f"{stars} ({record.rating_count})" if record.rating_count > 0 else "No rating"

    stats = [rating]
    if record.has_star_count and record.star_count:
        stats.append(f"⭐ {record.star_count}")
    if record.token_count:
        stats.append(f"{record.token_count} tokens")
    if record.chat_count:
        stats.append(f"💬 {record.chat_count}")
    if record.fork_count:
        stats.append(f"🍴 {record.fork_count}")

    name = record.name or "Default Name"
    if record.name_translated:
        name = f"{name} ({record.original_name})"

    tags = []
    for tag in record.tags:
        text = tag_text(tag)
        if tag_value(tag) in selected:
            text = f"[{text}]"
        tags.append(text)

    badges = []
    if record.verified:
        badges.append("✓ Verified")
    if record.recommended:
        badges.append("⭐ Recommended")

    lines = [
        f"[{index}] {name}  by {record.author}",
        f"    {' | '.join(stats)}",
        f"    {record.description[:200]}",
        f"    태그: {', '.join(tags) if tags else '없음'}",
    ]
    if badges:
        lines.append(f"    {' '.join(badges)}")
    lines.append(f"    링크: {record.page_url}")
    return "\n".join(lines)


def print_results(records, selected=()):
    if not records:
        print("\nNo characters found\n")
        return
    print(f"\n검색 결과: {len(records)}개\n")
    for i, record in enumerate(records, 1):
        print(format_record(record, i, selected))
        print()


def load_args_settings(args):
    from config import load_settings

    settings = load_settings(args.settings)
    if getattr(args, "provider", None):
        settings.provider = args.provider
    if getattr(args, "translate", None) is not None:
        settings.enable_translation = args.translate
    return settings


def cmd_search(args):
    """검색 실행"""
    from catalog import QuerySpec
    from searcher import SearchOrchestrator

    settings = load_args_settings(args)
    orchestrator = SearchOrchestrator(settings)
    query = QuerySpec(
        term=args.query,
        include_tags=split_tags(args.include),
        exclude_tags=split_tags(args.exclude),
        nsfw=args.nsfw,
        sort=args.sort or "",
        page=args.page,
    )
    records = asyncio.run(orchestrator.search(query))
    print_results(records, selected=query.include_tags)


async def _browse(settings):
    from searcher import (
        NextPage,
        PrevPage,
        Search,
        SearchController,
        SearchOrchestrator,
        SetPage,
        SetTranslation,
        ToggleTag,
    )

    controller = SearchController(SearchOrchestrator(settings))
    print("명령: s <검색어> | n | p | page <번호> | tag <태그> | tr on/off | q")

    while True:
        line = (await asyncio.to_thread(input, "> ")).strip()
        if not line:
            continue
        cmd, _, arg = line.partition(" ")
        if cmd == "q":
            break
        elif cmd == "s":
            controller.dispatch(Search(term=arg, include_tags=controller.query.include_tags))
        elif cmd == "n":
            controller.dispatch(NextPage())
        elif cmd == "p":
            controller.dispatch(PrevPage())
        elif cmd == "page" and arg.isdigit():
            controller.dispatch(SetPage(int(arg)))
        elif cmd == "tag" and arg:
            controller.dispatch(ToggleTag(arg.strip()))
        elif cmd == "tr":
            controller.dispatch(SetTranslation(arg.strip() == "on"))
            continue
        else:
            print("알 수 없는 명령")
            continue

        await controller.wait_idle()
        print(f"\n페이지 {controller.query.page}, 포함 태그: {', '.join(controller.query.include_tags) or '없음'}")
        print_results(controller.results, selected=controller.query.include_tags)


def cmd_browse(args):
    """대화형 검색 (명령 -> 디바운스 -> 검색)"""
    settings = load_args_settings(args)
    asyncio.run(_browse(settings))


def cmd_import(args):
    """호스트 앱으로 캐릭터 임포트"""
    from catalog import ImportFailed, HostImporter
    from catalog.models import PAGE_URLS

    settings = load_args_settings(args)
    importer = HostImporter(settings.host_base_url, timeout=settings.timeout)
    page_url = PAGE_URLS.get(settings.provider, "{path}").format(path=args.path)

    try:
        imported = asyncio.run(importer.import_url(args.path, page_url=page_url))
    except ImportFailed as e:
        print(f"⚠️  임포트 실패: {e}")
        if e.page_url:
            print(f"   캐릭터 페이지: {e.page_url}")
        return

    if args.upload:
        try:
            name = asyncio.run(importer.upload_card(imported.data, imported.file_name))
        except ImportFailed as e:
            print(f"⚠️  업로드 실패: {e}")
            return
        print(f"임포트 완료: {name}")
    else:
        path = imported.save(args.data_dir)
        print(f"저장 완료: {path}")


def cmd_config(args):
    """설정 조회/변경"""
    import json
    from config import Settings, load_settings, save_settings

    settings = load_settings(args.settings, use_env=False)

    if args.action == "show":
        print(json.dumps(settings.model_dump(), ensure_ascii=False, indent=2))
        return

    if args.key not in Settings.model_fields or args.key == "sort":
        print(f"알 수 없는 설정: {args.key}")
        return
    data = settings.model_dump()
    data[args.key] = args.value
    save_settings(Settings.model_validate(data), args.settings)
    print(f"{args.key} = {args.value}")


def main():
    parser = argparse.ArgumentParser(description="Chub/JanitorAI 캐릭터 검색")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path("data"),
        help="데이터 저장 디렉토리",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=Path("data") / "settings.json",
        help="설정 파일 경로",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="로그 레벨",
    )

    subparsers = parser.add_subparsers(dest="command", help="실행할 명령")

    # search / browse 공통 옵션
    def add_provider_args(sub):
        sub.add_argument(
            "--provider",
            type=str,
            choices=["chub", "janitor"],
            default=None,
            help="검색 제공자 (미지정시 설정값)",
        )
        sub.add_argument(
            "--translate",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="결과 번역 여부 (미지정시 설정값)",
        )

    # search 명령
    search_parser = subparsers.add_parser("search", help="캐릭터 검색")
    search_parser.add_argument(
        "query",
        type=str,
        nargs="?",
        default="",
        help="검색어",
    )
    search_parser.add_argument(
        "--include",
        type=str,
        default="",
        help="포함 태그 (쉼표 구분)",
    )
    search_parser.add_argument(
        "--exclude",
        type=str,
        default="",
        help="제외 태그 (쉼표 구분)",
    )
    search_parser.add_argument(
        "--nsfw",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="NSFW 포함 여부",
    )
    search_parser.add_argument(
        "--sort",
        type=str,
        default=None,
        help="정렬 키",
    )
    search_parser.add_argument(
        "--page",
        type=int,
        default=1,
        help="페이지 번호",
    )
    add_provider_args(search_parser)

    # browse 명령
    browse_parser = subparsers.add_parser("browse", help="대화형 검색")
    add_provider_args(browse_parser)

    # import 명령
    import_parser = subparsers.add_parser("import", help="호스트 앱으로 임포트")
    import_parser.add_argument(
        "path",
        type=str,
        help="캐릭터 경로 (예: author/character)",
    )
    import_parser.add_argument(
        "--upload",
        action="store_true",
        help="받은 카드를 호스트에 업로드",
    )
    import_parser.add_argument(
        "--provider",
        type=str,
        choices=["chub", "janitor"],
        default=None,
        help="제공자 (캐릭터 페이지 링크용)",
    )

    # config 명령
    config_parser = subparsers.add_parser("config", help="설정 조회/변경")
    config_parser.add_argument(
        "action",
        choices=["show", "set"],
        help="실행할 작업",
    )
    config_parser.add_argument("key", nargs="?", default="", help="설정 키")
    config_parser.add_argument("value", nargs="?", default="", help="설정 값")

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "search":
        cmd_search(args)
    elif args.command == "browse":
        cmd_browse(args)
    elif args.command == "import":
        cmd_import(args)
    elif args.command == "config":
        cmd_config(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
