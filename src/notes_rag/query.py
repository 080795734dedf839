from __future__ import annotations

import asyncio
import os
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console

from .config import AppConfig, load_config
from .pipeline import RagOrchestrator, build_orchestrator

console = Console()


def answer_question(
    question: Optional[str],
    cfg: AppConfig | None = None,
    orchestrator: Optional[RagOrchestrator] = None,
) -> str:
    if orchestrator is None:
        # Ensure .env is loaded even if config loading is bypassed elsewhere.
        load_dotenv()
        if cfg is None:
            cfg = load_config()

        if not os.getenv("OPENAI_API_KEY"):
            raise SystemExit("OPENAI_API_KEY is not set. Put it in a .env file or environment variable.")
        orchestrator = build_orchestrator(cfg)

    answer = asyncio.run(orchestrator.answer_query(question))

    console.rule("[bold green]Answer[/bold green]")
    console.print(answer.strip())
    return answer


__all__ = ["answer_question"]
