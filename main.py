"""Now-playing renderer entry point."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from core.config import AppConfig, load_config
from core.errors import ConfigurationError, PosterError
from core.models import PlaybackNotification
from services.plex_client import PlexArtworkClient
from services.poster_workflow import PosterWorkflow
from services.publisher import ArtworkPublisher
from services.webhook_server import create_static_app, create_webhook_app
from utils.logger import get_logger, setup_logger

logger = get_logger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render Plex now-playing artwork from webhooks")
    parser.add_argument("--config", default="config.yaml", help="Path to optional config file")
    parser.add_argument(
        "--payload",
        type=Path,
        help="Handle a single Plex webhook JSON payload from a file and exit",
    )
    return parser.parse_args(argv)


def build_workflow(config: AppConfig) -> PosterWorkflow:
    """Wire the pipeline. Raises ConfigurationError if startup requirements are missing."""
    publisher = ArtworkPublisher(config.output_path)
    try:
        publisher.ensure_directory()
    except PosterError as exc:
        raise ConfigurationError(str(exc)) from exc
    fetcher = PlexArtworkClient.from_config(config)
    return PosterWorkflow.from_config(config, fetcher=fetcher, publisher=publisher)


def run_payload(workflow: PosterWorkflow, path: Path) -> int:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        notification = PlaybackNotification.from_payload(payload)
    except (OSError, ValueError, PosterError) as exc:
        logger.error(f"Cannot read payload {path}: {exc}")
        return 2

    result = workflow.handle(notification)
    status = "success" if result.success else "failed"
    logger.info(
        f"{notification.raw_event} → {type(result.decision).__name__} ({status})"
        + (f" :: {result.message}" if result.message else "")
    )
    return 0 if result.success else 1


async def serve(config: AppConfig, workflow: PosterWorkflow) -> None:
    webhook_server = uvicorn.Server(
        uvicorn.Config(
            create_webhook_app(workflow),
            host=config.listen_host,
            port=config.webhook_port,
            log_config=None,
        )
    )
    static_server = uvicorn.Server(
        uvicorn.Config(
            create_static_app(config.output_dir),
            host=config.listen_host,
            port=config.static_port,
            log_config=None,
            access_log=False,
        )
    )
    logger.info(f"Webhook server listening on :{config.webhook_port}")
    logger.info(f"Static file server listening on :{config.static_port}")
    await asyncio.gather(webhook_server.serve(), static_server.serve())


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    # loguru's default stderr sink stays active until the config names a log dir.
    try:
        config = load_config(args.config)
        setup_logger(config.log_dir)
        workflow = build_workflow(config)
    except (ConfigurationError, OSError) as exc:
        logger.critical(f"Startup failed: {exc}")
        return 1

    if args.payload is not None:
        return run_payload(workflow, args.payload)

    asyncio.run(serve(config, workflow))
    return 0


if __name__ == "__main__":
    sys.exit(main())
