"""Command-line entry point for the newsrag service."""

from __future__ import annotations

import argparse
import json
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from newsrag.config import config
from newsrag.errors import NewsRagError
from newsrag.factory import build_chat_service, build_ingestion_pipeline
from newsrag.news_feed import GuardianClient, load_corpus, save_corpus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from logging import Logger

PROJECT_ROOT = Path(__file__).resolve().parent
DEFAULT_APP = PROJECT_ROOT / "app.py"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Build the CLI parser and read command-line arguments."""  # noqa: DOC201
    parser = argparse.ArgumentParser(
        description="Retrieval-augmented chat over a news corpus.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ui = subparsers.add_parser("ui", help="Launch the Streamlit chat UI.")
    ui.add_argument(
        "--app",
        type=Path,
        default=DEFAULT_APP,
        help="Path to the Streamlit script (default: app.py).",
    )
    ui.add_argument(
        "--port",
        type=int,
        default=8501,
        help="Port for the Streamlit server (default: 8501).",
    )
    ui.add_argument(
        "--address",
        default="localhost",
        help="Bind address for the Streamlit server (default: localhost).",
    )
    ui.add_argument(
        "--show",
        dest="headless",
        action="store_false",
        help="Open Streamlit in a browser window instead of headless mode.",
    )
    ui.set_defaults(headless=True)

    fetch = subparsers.add_parser(
        "fetch-news", help="Fetch the newest Guardian articles into the corpus."
    )
    fetch.add_argument(
        "--output",
        type=Path,
        default=config.NEWS_JSON_PATH,
        help="Corpus JSON file to write (default: %(default)s).",
    )

    ingest = subparsers.add_parser(
        "ingest", help="Chunk, embed and index the news corpus."
    )
    ingest.add_argument(
        "--input",
        type=Path,
        default=config.NEWS_JSON_PATH,
        help="Corpus JSON file to read (default: %(default)s).",
    )

    chat = subparsers.add_parser("chat", help="Send one chat message.")
    chat.add_argument("--session", required=True, help="Chat session id.")
    chat.add_argument("message", help="User message.")

    return parser.parse_args(argv)


def build_streamlit_command(
    script_path: Path,
    *,
    port: int,
    headless: bool,
    address: str,
) -> list[str]:
    """Construct the streamlit CLI invocation."""  # noqa: DOC201
    return [
        sys.executable,
        "-m",
        "streamlit",
        "run",
        str(script_path),
        "--server.port",
        str(port),
        "--server.address",
        address,
        "--server.headless",
        "true" if headless else "false",
    ]


def run_streamlit(command: Sequence[str], logger: Logger) -> int:
    """Execute the configured streamlit command and return its exit code."""  # noqa: DOC201
    try:
        result = subprocess.run(
            command,
            check=False,
            cwd=PROJECT_ROOT,
        )
    except KeyboardInterrupt:
        logger.info("newsrag UI stopped by user")
        return 0
    except OSError:
        logger.exception("Unable to launch Streamlit")
        return 1
    return result.returncode


def run_ui(args: argparse.Namespace, logger: Logger) -> int:
    script_path = (
        args.app if args.app.is_absolute() else (PROJECT_ROOT / args.app)
    ).resolve()
    if not script_path.exists():
        logger.error("Streamlit script not found: %s", script_path)
        return 1

    logger.info(
        "Starting newsrag chat UI at http://%s:%s (headless=%s)",
        args.address,
        args.port,
        args.headless,
    )
    command = build_streamlit_command(
        script_path,
        port=args.port,
        headless=args.headless,
        address=args.address,
    )
    return_code = run_streamlit(command, logger)
    if return_code != 0:
        logger.error("Streamlit exited with status %s", return_code)
    return return_code


def run_fetch_news(args: argparse.Namespace, logger: Logger) -> int:
    logger.info("Fetching Guardian articles...")
    with GuardianClient() as client:
        documents = client.fetch_articles()
    save_corpus(documents, args.output)
    return 0


def run_ingest(args: argparse.Namespace, logger: Logger) -> int:
    documents = load_corpus(args.input)
    report = build_ingestion_pipeline().ingest(documents)
    logger.info(
        "Indexed %d chunks from %d articles in %d batches",
        report.chunks,
        report.documents,
        report.batches,
    )
    return 0


def run_chat(args: argparse.Namespace, logger: Logger) -> int:
    result = build_chat_service().handle_turn(args.session, args.message)
    logger.debug("Answer generated with %s", result.model)
    sys.stdout.write(json.dumps(result.to_dict(), indent=2) + "\n")
    return 0


COMMANDS = {
    "ui": run_ui,
    "fetch-news": run_fetch_news,
    "ingest": run_ingest,
    "chat": run_chat,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Validate configuration and dispatch the requested command."""  # noqa: DOC201
    args = parse_args(argv)

    config.setup_logging()
    logger = config.get_logger(__name__)

    if args.command != "fetch-news":
        try:
            config.validate()
        except ValueError:
            logger.exception("Configuration invalid")
            return 1

    try:
        return COMMANDS[args.command](args, logger)
    except (NewsRagError, OSError, ValueError):
        logger.exception("Command %s failed", args.command)
        return 1


if __name__ == "__main__":
    sys.exit(main())
