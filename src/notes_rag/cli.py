from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict

from rich.console import Console
from rich.logging import RichHandler

from .config import load_config
from .errors import FailureKind, NotesRagError
from .ingest import build_notes, create_note
from .query import answer_question

console = Console()

# Every failure kind gets its own message and exit status.
FAILURE_REPORTS: Dict[FailureKind, tuple[str, int]] = {
    FailureKind.VALIDATION: ("Invalid input", 2),
    FailureKind.EMBEDDING: ("Failed to create vector embedding", 3),
    FailureKind.STORE_WRITE: ("Failed to create note", 4),
    FailureKind.STORE_READ: ("Failed to search notes", 5),
    FailureKind.GENERATION: ("Unable to process the AI response", 6),
}


def _add_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Path to a config YAML file (default: config.yaml).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Notes RAG - store short notes and ask questions answered with them as context."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Embed and store a single note.")
    add_parser.add_argument("text", type=str, help="Note text.")
    _add_config_argument(add_parser)

    ask_parser = subparsers.add_parser("ask", help="Ask a question over your notes.")
    ask_parser.add_argument(
        "question",
        type=str,
        nargs="?",
        default=None,
        help="Question to ask (a default question is used when omitted).",
    )
    _add_config_argument(ask_parser)

    import_parser = subparsers.add_parser(
        "import",
        help="Import .md, .txt and .pdf files from the data directory as notes.",
    )
    _add_config_argument(import_parser)

    return parser


def report_failure(exc: NotesRagError) -> int:
    message, code = FAILURE_REPORTS[exc.kind]
    console.print(f"[red]{message}:[/red] {exc.detail}")
    return code


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    cfg = load_config(Path(args.config))
    logging.basicConfig(
        level=cfg.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    try:
        if args.command == "add":
            created = create_note(args.text, cfg)
            console.print(f"[green]Created note[/green] {created['note'].id}")
        elif args.command == "ask":
            answer_question(args.question, cfg)
        elif args.command == "import":
            console.print("[bold green]Importing notes...[/bold green]")
            build_notes(cfg)
    except NotesRagError as exc:
        return report_failure(exc)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
