"""
CLI tool for inspecting and maintaining the prompt library database.

Usage:
    python -m prompt_library.cli init
    python -m prompt_library.cli prompts
    python -m prompt_library.cli prompts --mode management --search review
    python -m prompt_library.cli history
    python -m prompt_library.cli toggle-history 3
    python -m prompt_library.cli toggle-prompt 2
    python -m prompt_library.cli rate 2 5
    python -m prompt_library.cli stats
    python -m prompt_library.cli --database /tmp/prompts.db serve --port 3001
"""
import argparse
import asyncio
import sys
from typing import List, Optional, Sequence

from prompt_library.core.config import Settings, get_settings
from prompt_library.core.exceptions import PromptLibraryException
from prompt_library.database.schema import SCHEMA_VERSION
from prompt_library.models.schemas import PromptResponse, UploadHistoryResponse
from prompt_library.services.prompt_store import PromptStore


def _print_prompts(prompts: Sequence[PromptResponse]) -> None:
    if not prompts:
        print("No prompts found.")
        return

    print(f"\n{'ID':<34} {'Title':<30} {'Active':<7} {'Source':<10} {'Rating':<7} {'Fav':<4} {'Tags'}")
    print("=" * 120)
    for prompt in prompts:
        active = 'Yes' if prompt.is_active else 'No'
        if prompt.history_id:
            source = 'on' if prompt.history_is_active else 'off'
        else:
            source = '-'
        rating = f"{prompt.rating or 0} ({prompt.rating_count})"
        favorite = '*' if prompt.is_favorite else ''
        print(f"{prompt.id:<34} {prompt.title[:29]:<30} {active:<7} {source:<10} {rating:<7} {favorite:<4} {', '.join(prompt.tags)}")

    print(f"\nTotal: {len(prompts)} prompt(s)")


def _print_history(entries: Sequence[UploadHistoryResponse]) -> None:
    if not entries:
        print("No upload history found.")
        return

    print(f"\n{'ID':<34} {'File':<30} {'Uploaded':<12} {'Status':<8} {'Active':<7} {'Prompts'}")
    print("=" * 105)
    for entry in entries:
        uploaded = entry.upload_date.split('T')[0] if 'T' in entry.upload_date else entry.upload_date
        active = 'Yes' if entry.is_active else 'No'
        print(f"{entry.id:<34} {entry.file_name[:29]:<30} {uploaded:<12} {entry.status.value:<8} {active:<7} {entry.prompt_count}")

    print(f"\nTotal: {len(entries)} upload(s)")


async def init_database(store: PromptStore) -> None:
    """Create or migrate the schema and load the starter data into an empty database."""
    inserted = await store.seed_if_empty()
    print(f"Schema ready (version {SCHEMA_VERSION}) at {store.database.url}")
    if inserted:
        print(f"Seeded {inserted} starter prompts.")
    else:
        print("Database already has prompts, seed skipped.")


async def list_prompts(store: PromptStore, mode: Optional[str], search: Optional[str], favorites: bool) -> None:
    if search:
        prompts = await store.search_prompts(search, mode=mode)
    elif mode:
        prompts = await store.list_visible_prompts(mode)
    else:
        prompts = await store.list_prompts()
    if favorites:
        prompts = [prompt for prompt in prompts if prompt.is_favorite]
    _print_prompts(prompts)


async def list_history(store: PromptStore) -> None:
    _print_history(await store.list_history())


async def toggle_history(store: PromptStore, history_id: str) -> None:
    entries = await store.toggle_history_active(history_id)
    entry = next(item for item in entries if item.id == history_id)
    print(f"Upload {history_id} is now {'active' if entry.is_active else 'inactive'}.")


async def toggle_prompt(store: PromptStore, prompt_id: str) -> None:
    prompts = await store.toggle_prompt_active(prompt_id)
    prompt = next(item for item in prompts if item.id == prompt_id)
    print(f"Prompt {prompt_id} is now {'active' if prompt.is_active else 'inactive'}.")


async def rate_prompt(store: PromptStore, prompt_id: str, rating: int) -> None:
    prompt = await store.set_rating(prompt_id, rating)
    print(f"Prompt {prompt_id} rated {prompt.rating} ({prompt.rating_count} rating(s)).")


async def show_stats(store: PromptStore, mode: Optional[str]) -> None:
    """Print tag, rating and per-upload statistics."""
    analytics = await store.get_analytics(mode)

    print(f"\nPrompts: {analytics.total_prompts}")
    ratings = analytics.rating_analytics
    print(f"Average rating: {ratings.average_rating:.2f}   Favorites: {ratings.favorite_count}")
    distribution = "  ".join(f"{level}:{count}" for level, count in sorted(ratings.rating_distribution.items()))
    print(f"Distribution: {distribution}")

    if analytics.tag_usage:
        print(f"\n{'Tag':<25} {'Count':<7} {'Share'}")
        print("=" * 45)
        for usage in analytics.tag_usage:
            print(f"{usage.tag:<25} {usage.count:<7} {usage.percentage:.1f}%")

    if analytics.sources:
        print(f"\n{'File':<30} {'Active':<7} {'Prompts':<8} {'Avg len':<9} {'Avg tags':<9} {'Active %'}")
        print("=" * 80)
        for source in analytics.sources:
            active = 'Yes' if source.is_active else 'No'
            print(
                f"{source.file_name[:29]:<30} {active:<7} {source.prompt_count:<8} "
                f"{source.avg_content_length:<9.1f} {source.avg_tags:<9.2f} {source.active_percentage:.1f}%"
            )


async def run_command(args: argparse.Namespace, settings: Settings) -> None:
    """Open the store, run one command and close the store."""
    async with PromptStore.from_settings(settings) as store:
        if args.command == 'init':
            await init_database(store)
        elif args.command == 'prompts':
            await list_prompts(store, args.mode, args.search, args.favorites)
        elif args.command == 'history':
            await list_history(store)
        elif args.command == 'toggle-history':
            await toggle_history(store, args.history_id)
        elif args.command == 'toggle-prompt':
            await toggle_prompt(store, args.prompt_id)
        elif args.command == 'rate':
            await rate_prompt(store, args.prompt_id, args.rating)
        elif args.command == 'stats':
            await show_stats(store, args.mode)


def serve(settings: Settings, host: Optional[str], port: Optional[int]) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn
    from prompt_library.main import create_app

    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='python -m prompt_library.cli',
        description='Manage the prompt library database',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create the schema and starter prompts
  python -m prompt_library.cli init

  # Prompts shown on the management page that mention "review"
  python -m prompt_library.cli prompts --mode management --search review

  # Hide every prompt from an upload
  python -m prompt_library.cli toggle-history 3
        """
    )
    parser.add_argument('--database', help='SQLite file to use (":memory:" for a throwaway store)')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    subparsers.add_parser('init', help='Create or migrate the schema and seed an empty database')

    prompts_parser = subparsers.add_parser('prompts', help='List prompts')
    prompts_parser.add_argument('--mode', choices=['dashboard', 'management'], help='Visibility mode')
    prompts_parser.add_argument('--search', help='Substring to search for')
    prompts_parser.add_argument('--favorites', action='store_true', help='Only favorite prompts')

    subparsers.add_parser('history', help='List upload history')

    toggle_history_parser = subparsers.add_parser('toggle-history', help='Flip an upload\'s active flag')
    toggle_history_parser.add_argument('history_id', help='Upload history id')

    toggle_prompt_parser = subparsers.add_parser('toggle-prompt', help='Flip a prompt\'s active flag')
    toggle_prompt_parser.add_argument('prompt_id', help='Prompt id')

    rate_parser = subparsers.add_parser('rate', help='Rate a prompt (0 clears the rating)')
    rate_parser.add_argument('prompt_id', help='Prompt id')
    rate_parser.add_argument('rating', type=int, help='Rating from 0 to 5')

    stats_parser = subparsers.add_parser('stats', help='Show library analytics')
    stats_parser.add_argument('--mode', choices=['dashboard', 'management'], help='Visibility mode')

    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument('--host', help='Bind address')
    serve_parser.add_argument('--port', type=int, help='Bind port')

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    settings = get_settings()
    if args.database:
        settings = settings.model_copy(update={"database_path": args.database})

    if args.command == 'serve':
        serve(settings, args.host, args.port)
        return

    try:
        asyncio.run(run_command(args, settings))
    except PromptLibraryException as e:
        print(f"\nError: {e.message}")
        sys.exit(1)


if __name__ == '__main__':
    main()
