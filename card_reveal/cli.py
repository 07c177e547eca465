"""Card reveal CLI entrypoints."""

from __future__ import annotations

import argparse
import concurrent.futures
import random
import uuid
import webbrowser
from pathlib import Path

from .background import BackgroundLoop
from .catalog.assets import DirectoryAssetSource, HttpAssetSource, load_catalog
from .chat.command_registry import help_lines
from .chat.intent_parser import parse_intent
from .engine import CardRevealEngine
from .game.content import FeatureContent, ImageContent, RevealedContent, TextContent
from .game.selection import MAX_SELECTED, SLOT_COUNT
from .game.session import GameSession
from .runs.events import EventWriter
from .server import serve
from .settings import RevealSettings
from .share.links import PLATFORMS, build_share_url, normalize_platform
from .share.preview import write_share_page
from .utils import load_dotenv

_BOLD = "\x1b[1m"
_RESET = "\x1b[0m"
_CELL_WIDTH = 22


def ansi_highlight(text: str) -> str:
    return f"{_BOLD}{text}{_RESET}"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="card-reveal", description="Three-card reveal game")
    sub = parser.add_subparsers(dest="command")

    play = sub.add_parser("play", help="Interactive game loop")
    play.add_argument("--data", help="Asset data directory (prompts.txt, features.txt, images.json)")
    play.add_argument("--api", help="Load assets from a running server instead, e.g. http://localhost:8787")
    play.add_argument("--public", help="Public directory used to resolve image references")
    play.add_argument("--out", default=".", help="Directory for saved captures and events")
    play.add_argument("--events", help="Path to events.jsonl")
    play.add_argument("--seed", type=int, help="Seed for content draws")

    server = sub.add_parser("serve", help="Serve assets, uploads and share pages")
    server.add_argument("--host", default="127.0.0.1")
    server.add_argument("--port", type=int, default=8787)
    server.add_argument("--data")
    server.add_argument("--public")
    server.add_argument("--base-url", dest="base_url")

    share = sub.add_parser("share-url", help="Print a share URL")
    share.add_argument("platform", choices=PLATFORMS)
    share.add_argument("--image-url", dest="image_url")

    preview = sub.add_parser("preview", help="Write the share preview page for an image URL")
    preview.add_argument("image_url")
    preview.add_argument("--out", default="share.html")

    return parser


def _describe(content: RevealedContent | None) -> str:
    if content is None:
        return "?"
    if isinstance(content, ImageContent):
        return f"[image] {content.ref}"
    if isinstance(content, TextContent):
        return f"[prompt] {content.text}"
    if isinstance(content, FeatureContent):
        return f"[feature] {content.feature}"
    raise TypeError(f"Unknown content variant: {type(content).__name__}")


def _clip(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 1] + "…"


def render_board(session: GameSession) -> str:
    rows: list[str] = []
    for row_start in range(0, SLOT_COUNT, 3):
        cells: list[str] = []
        for idx in range(row_start, row_start + 3):
            if idx in session.selected:
                label = _clip(_describe(session.content_at(idx)), _CELL_WIDTH - 5)
                cells.append(f"[{idx + 1}* {label}]".ljust(_CELL_WIDTH))
            else:
                cells.append(f"[{idx + 1}  ]".ljust(_CELL_WIDTH))
        rows.append(" ".join(cells).rstrip())
    return "\n".join(rows)


def render_reveal(session: GameSession) -> str:
    view = session.reveal_view()
    lines = ["── Your reveal ──"]
    lines.append(f"Image:   {view.image_ref or '(none)'}")
    lines.append(f"Feature: {view.feature or '(none)'}")
    lines.append(f"Prompt:  {view.prompt or '(none)'}")
    lines.append("Commands: /save, /share x|facebook|telegram, /close, /again")
    return "\n".join(lines)


def _load_settings(args: argparse.Namespace) -> RevealSettings:
    settings = RevealSettings.from_env()
    overrides: dict[str, object] = {}
    if getattr(args, "data", None):
        overrides["data_dir"] = Path(args.data)
    if getattr(args, "public", None):
        overrides["public_dir"] = Path(args.public)
    if getattr(args, "base_url", None):
        overrides["base_url"] = str(args.base_url).rstrip("/")
    return settings.with_overrides(**overrides)


def _handle_play(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    out_dir = Path(args.out)
    events_path = Path(args.events) if args.events else out_dir / "events.jsonl"
    session_id = uuid.uuid4().hex[:12]
    bootstrap = EventWriter(events_path, session_id)
    source = HttpAssetSource(args.api) if args.api else DirectoryAssetSource(settings.data_dir)
    catalog = load_catalog(source, bootstrap)
    if not catalog.is_complete():
        print("Some asset lists are empty; default cards will be used.")
    rng = random.Random(args.seed) if args.seed is not None else None
    engine = CardRevealEngine(events_path, catalog, settings=settings, rng=rng, session_id=session_id)
    runner = BackgroundLoop()
    runner.start()

    print(f"Pick {MAX_SELECTED} of {SLOT_COUNT} cards. Type card numbers (e.g. 2 5 7) or /help.")
    print(render_board(engine.session))

    while True:
        try:
            line = input("> ")
        except (EOFError, KeyboardInterrupt):
            break
        intent = parse_intent(line)
        if intent.action == "noop":
            continue
        if intent.action == "quit":
            break
        if intent.action == "help":
            print("\n".join(help_lines()))
            continue
        if intent.action == "unknown":
            print(f"Unknown input: {intent.raw.strip()} (type /help)")
            continue
        if intent.action == "toggle":
            if engine.session.revealed:
                print("Cards are revealed. Type /again to play another round.")
                continue
            for slot in intent.slots:
                if not engine.toggle(slot):
                    print(f"Card {slot + 1} can't be flipped right now.")
            print(render_board(engine.session))
            if engine.session.revealed and engine.session.modal_open:
                print(render_reveal(engine.session))
            continue
        if intent.action == "show":
            print(render_board(engine.session))
            if engine.session.revealed:
                print(render_reveal(engine.session))
            continue
        if intent.action == "close_modal":
            if engine.close_modal():
                print("Reveal closed. Type /again to play another round.")
            else:
                print("Nothing to close.")
            continue
        if intent.action == "reset":
            engine.reset()
            print(render_board(engine.session))
            continue
        if intent.action == "save":
            if not engine.session.revealed:
                print("Reveal three cards before saving.")
                continue
            target = Path(intent.command_args.get("arg") or out_dir)
            runner.submit(engine.save(target), _report_save)
            print("Saving capture in the background...")
            continue
        if intent.action == "share":
            if not engine.session.revealed:
                print("Reveal three cards before sharing.")
                continue
            try:
                platform = normalize_platform(intent.command_args.get("arg") or "")
            except ValueError as exc:
                print(str(exc))
                continue
            runner.submit(engine.share(platform), lambda future: _report_share(future, settings))
            print(f"Preparing {platform} share link; /again still works meanwhile.")
            continue

    if runner.pending:
        print("Waiting for pending capture/share work...")
    runner.stop()
    engine.finish()
    return 0


def _report_save(future: concurrent.futures.Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        print(f"\nSave failed: {exc}")
        return
    path = future.result()
    if path:
        print(f"\nSaved {path}")
    else:
        print("\nCapture failed or the round was reset; nothing was saved.")


def _report_share(future: concurrent.futures.Future, settings: RevealSettings) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        print(f"\nShare failed: {exc}")
        return
    url = future.result()
    if not url:
        print("\nShare discarded; the round was reset.")
        return
    print(f"\nShare link: {ansi_highlight(url)}")
    if settings.open_browser:
        webbrowser.open(url)


def _handle_serve(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    return serve(settings, host=args.host, port=args.port)


def _handle_share_url(args: argparse.Namespace) -> int:
    settings = RevealSettings.from_env()
    url = build_share_url(
        args.platform,
        args.image_url,
        base_url=settings.base_url,
        share_text=settings.share_text,
        fallback_url=settings.fallback_url,
    )
    print(url)
    return 0


def _handle_preview(args: argparse.Namespace) -> int:
    settings = RevealSettings.from_env()
    out_path = write_share_page(
        args.image_url,
        Path(args.out),
        description=settings.share_text,
        destination_url=settings.fallback_url,
    )
    print(f"Wrote {out_path}")
    return 0


def main() -> None:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args()
    if args.command == "play":
        raise SystemExit(_handle_play(args))
    if args.command == "serve":
        raise SystemExit(_handle_serve(args))
    if args.command == "share-url":
        raise SystemExit(_handle_share_url(args))
    if args.command == "preview":
        raise SystemExit(_handle_preview(args))
    parser.print_help()
    raise SystemExit(1)


if __name__ == "__main__":
    main()
