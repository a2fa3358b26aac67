import json
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import PopulationConfig
from .dataset import PopulationResult, VerifyResult

console = Console(stderr=True, highlight=False, emoji=False)

MAX_LISTED = 20


def format_bytes(num_bytes: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(num_bytes)
    idx = 0
    while size >= 1024 and idx < len(units) - 1:
        size /= 1024
        idx += 1
    if idx == 0:
        return f"{int(size)} {units[idx]}"
    return f"{size:.1f} {units[idx]}"


def print_summary(config: PopulationConfig, out: Optional[Console] = None):
    out = out or console
    out.print(f"{'path:':<16}  {config.path}", markup=False, soft_wrap=True)
    out.print(f"{'total bytes:':<16}  {config.total_size}", markup=False, soft_wrap=True)
    out.print(f"{'large files:':<16}  {config.bulk_files}", markup=False, soft_wrap=True)
    out.print(f"{'large file size:':<16}  {config.bulk_size} bytes", markup=False, soft_wrap=True)
    out.print(f"{'subdirs:':<16}  {config.subdirs}", markup=False, soft_wrap=True)


class ProgressPrinter:
    """Callback для populate(): печатает строку прогресса каждые 100 файлов."""

    def __init__(self, out: Optional[Console] = None):
        self.out = out or console

    def __call__(self, nfiles: int, planned_bytes: int, last_path: Path, last_size: int):
        self.out.print(
            f"completed {planned_bytes} bytes after {nfiles} files\n"
            f'    (last: "{last_path}" at {last_size} bytes)',
            markup=False,
            soft_wrap=True,
        )


def print_result(result: PopulationResult, out: Optional[Console] = None):
    out = out or console
    if result.dry_run:
        out.print(
            f"[yellow]dry run:[/yellow] would populate {result.files} files, "
            f"{result.planned_bytes} bytes ({format_bytes(result.planned_bytes)})",
            soft_wrap=True,
        )
        return
    table = Table(show_header=False, box=None)
    table.add_column(style="cyan")
    table.add_column(style="white")
    table.add_row("files:", str(result.files))
    table.add_row("planned bytes:", f"{result.planned_bytes} ({format_bytes(result.planned_bytes)})")
    table.add_row("appended:", f"{result.bytes_written} ({format_bytes(result.bytes_written)})")
    table.add_row("created:", str(result.files_created))
    table.add_row("extended:", str(result.files_extended))
    table.add_row("unchanged:", str(result.files_complete))
    if result.files_oversized:
        table.add_row("oversized:", f"[yellow]{result.files_oversized}[/yellow]")
    table.add_row("directories:", str(result.dirs_created))
    rate = result.bytes_written / 1024 / 1024 / result.duration_sec if result.duration_sec > 0 else 0.0
    table.add_row("elapsed:", f"{result.duration_sec:.1f}s ({rate:.1f} MB/s)")
    out.print(table)


def print_verify(result: VerifyResult, out: Optional[Console] = None):
    out = out or console
    if result.ok:
        out.print(f"[green]✓[/green] {result.files} files, {result.planned_bytes} bytes: tree matches", soft_wrap=True)
        return
    for label, paths in (("missing", result.missing), ("short", result.short), ("oversized", result.oversized)):
        if not paths:
            continue
        out.print(f"[red]{label}: {len(paths)}[/red]")
        for p in paths[:MAX_LISTED]:
            out.print(f"    {p}", markup=False, soft_wrap=True)
        if len(paths) > MAX_LISTED:
            out.print(f"    ... and {len(paths) - MAX_LISTED} more", markup=False, soft_wrap=True)


def print_error(message: str, out: Optional[Console] = None):
    (out or console).print(f"[bold red]{escape(message)}[/bold red]", soft_wrap=True)


def write_report(path: str, config: PopulationConfig, result: PopulationResult) -> dict:
    out = asdict(result)
    out["config"] = config.to_dict()
    with open(path, "w") as f:
        json.dump(out, f, indent=2)
    return out
