from __future__ import annotations

import asyncio
import textwrap
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pypdf import PdfReader
from rich.console import Console
from rich.progress import Progress

from .config import AppConfig, load_config
from .models import Note
from .pipeline import RagOrchestrator, build_orchestrator

console = Console()

SUPPORTED_SUFFIXES = {".md", ".txt", ".pdf"}


def load_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def load_pdf(path: Path) -> str:
    reader = PdfReader(str(path))
    pages = []
    for i, page in enumerate(reader.pages):
        try:
            pages.append(page.extract_text() or "")
        except Exception as exc:
            console.print(f"[yellow]Skipping page {i + 1} of {path.name}: {exc}[/yellow]")
            pages.append("")
    return "\n\n".join(pages)


def chunk_text(text: str, chunk_size: int = 800, chunk_overlap: int = 200) -> List[str]:
    """Split text into overlapping character windows, dropping blank ones."""
    if chunk_overlap >= chunk_size:
        raise ValueError("chunk_overlap must be less than chunk_size")

    chunks: List[str] = []
    cleaned = text.replace("\r\n", "\n").strip()
    if not cleaned:
        return chunks

    start = 0
    while start < len(cleaned):
        piece = textwrap.dedent(cleaned[start : start + chunk_size]).strip()
        if piece:
            chunks.append(piece)
        if start + chunk_size >= len(cleaned):
            break
        start += chunk_size - chunk_overlap
    return chunks


def iter_files(data_dir: Path) -> Iterable[Path]:
    for path in sorted(data_dir.rglob("*")):
        if path.is_file() and path.suffix.lower() in SUPPORTED_SUFFIXES:
            yield path


def read_file(path: Path) -> str:
    if path.suffix.lower() == ".pdf":
        return load_pdf(path)
    return load_text(path)


async def import_notes(
    orchestrator: RagOrchestrator,
    data_dir: Path,
    chunk_size: int = 800,
    chunk_overlap: int = 200,
) -> List[Note]:
    """
    Ingest every supported file under `data_dir` as one or more notes.

    Files that cannot be read are reported and skipped. A pipeline failure
    (embedding or storage) stops the import and propagates.
    """
    if not data_dir.exists():
        console.print(f"[red]Data directory not found:[/red] {data_dir}")
        return []

    files = list(iter_files(data_dir))
    if not files:
        console.print(f"[yellow]No .md, .txt or .pdf files found in {data_dir}[/yellow]")
        return []

    notes: List[Note] = []
    console.print(f"[green]Importing notes from:[/green] {data_dir}")
    with Progress(console=console) as progress:
        task = progress.add_task("Reading & chunking documents...", total=len(files))
        for path in files:
            progress.update(task, description=f"Processing {path.name}")
            try:
                text = read_file(path)
            except Exception as exc:
                console.print(f"[red]Failed to read {path}: {exc}[/red]")
                progress.update(task, advance=1)
                continue

            for piece in chunk_text(text, chunk_size=chunk_size, chunk_overlap=chunk_overlap):
                notes.append(await orchestrator.ingest_note(piece))
            progress.update(task, advance=1)

    console.print(f"[green]Created {len(notes)} notes.[/green]")
    return notes


def create_note(
    text: str,
    cfg: AppConfig | None = None,
    orchestrator: Optional[RagOrchestrator] = None,
) -> Dict[str, object]:
    if orchestrator is None:
        orchestrator = build_orchestrator(cfg or load_config())

    note = asyncio.run(orchestrator.ingest_note(text))
    return {"text": text, "note": note}


def build_notes(
    cfg: AppConfig | None = None,
    orchestrator: Optional[RagOrchestrator] = None,
) -> List[Note]:
    if cfg is None:
        cfg = load_config()
    if orchestrator is None:
        orchestrator = build_orchestrator(cfg)

    return asyncio.run(
        import_notes(
            orchestrator,
            cfg.data_dir_resolved,
            chunk_size=cfg.chunk_size,
            chunk_overlap=cfg.chunk_overlap,
        )
    )


__all__ = ["chunk_text", "create_note", "build_notes", "import_notes", "iter_files"]
