#!/usr/bin/env python3
"""Main entry point for the Rivo player."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from rivo_player.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from rivo_player.config.container import Container

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.warning("Could not load %s, falling back to basic config", _LOGGING_CONFIG_PATH)
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    logging.getLogger().setLevel(resolved_level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rivo-player", description="Rivo playback core")
    subparsers = parser.add_subparsers(dest="command", required=True)

    play = subparsers.add_parser("play", help="play backend tracks by id")
    play.add_argument("track_ids", nargs="+", metavar="ID")
    play.add_argument("--shuffle", action="store_true", help="enable shuffle")
    play.add_argument("--repeat", choices=["off", "one", "all"], default="off")

    subparsers.add_parser("stats", help="print artist and local play stats")
    return parser


async def run_play(container: Container, track_ids: list[str], shuffle: bool, repeat: str) -> int:
    from rivo_player.domain.music.value_objects import RepeatMode, TrackId
    from rivo_player.domain.shared.events import PlaybackFailed, QueueExhausted, get_event_bus

    logger = logging.getLogger(__name__)

    tracks = []
    for raw_id in track_ids:
        track = await container.track_repository.get(TrackId(raw_id))
        if track is None:
            logger.warning(LogTemplates.BACKEND_FETCH_FAILED, raw_id, ErrorMessages.MUSIC_NOT_FOUND)
            continue
        tracks.append(track)

    if not tracks:
        logger.error(ErrorMessages.MUSIC_NOT_FOUND)
        return 1

    finished = asyncio.Event()

    async def on_exhausted(event: QueueExhausted) -> None:
        finished.set()

    async def on_failed(event: PlaybackFailed) -> None:
        if not event.will_retry:
            finished.set()

    bus = get_event_bus()
    bus.subscribe(QueueExhausted, on_exhausted)
    bus.subscribe(PlaybackFailed, on_failed)

    controller = container.playback_controller
    await controller.set_queue(tracks)
    if shuffle:
        controller.toggle_shuffle()
    controller.set_repeat_mode(RepeatMode(repeat))

    await controller.play_at(0)
    await finished.wait()

    if controller.error:
        logger.error(controller.error)
        return 1
    return 0


async def run_stats(container: Container) -> int:
    service = container.stats_service

    artist = await service.artist_stats()
    print(f"Total plays:  {artist.total_plays}")
    print(f"Followers:    {artist.followers_count}")
    print(f"Total songs:  {artist.total_songs}")
    for index, song in enumerate(artist.top_songs, start=1):
        print(f"  {index}. {song.title} ({song.play_count} plays)")

    user_id = container.settings.backend.user_id
    if user_id:
        listener = await service.listener_stats(user_id)
        print(f"Listener {listener.user_id}: {listener.total_plays} plays")

    summary = await service.local_play_summary()
    print(f"Counted here: {summary.total_plays} ({summary.unreported_plays} unreported)")
    for entry in summary.top_artists:
        print(f"  {entry.artist}: {entry.plays} plays")
    return 0


async def run(args: argparse.Namespace, container: Container) -> int:
    await container.initialize()
    try:
        if args.command == "play":
            return await run_play(container, args.track_ids, args.shuffle, args.repeat)
        return await run_stats(container)
    finally:
        await container.shutdown()


def main(argv: list[str] | None = None) -> int:
    from rivo_player.config.settings import get_settings

    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)
    logger.info(LogTemplates.APP_STARTING.format(environment=settings.environment))

    from rivo_player.config.container import create_container
    from rivo_player.domain.shared.exceptions import DomainError

    container = create_container(settings)

    try:
        exit_code = asyncio.run(run(args, container))
        logger.info(LogTemplates.APP_STOPPED)
        return exit_code
    except KeyboardInterrupt:
        logger.info(LogTemplates.APP_KEYBOARD_INTERRUPT)
        return 0
    except DomainError as e:
        logger.error(LogTemplates.APP_FATAL_ERROR, e.message)
        return 1
    except Exception as e:
        logger.exception(LogTemplates.APP_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
