"""
Интерактивный мастер fspopulate с использованием rich и questionary.
"""
from pathlib import Path

import questionary
from prompt_toolkit.completion import PathCompleter
from rich.table import Table

from .cli import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, run_populate, run_verify
from .config import DEFAULT_BULK_FILES, DEFAULT_SUBDIRS, BULK_SIZE_DIVISOR, PopulationConfig, parse_size
from .report import console, format_bytes

path_completer = PathCompleter(expanduser=True, only_directories=True)

INTERRUPTED_MESSAGE = "\n[bold yellow]Остановка по запросу пользователя. Повторный запуск продолжит с того же места.[/bold yellow]"


def validate_size_format(value: str) -> bool:
    try:
        parse_size(value)
    except ValueError:
        return False
    return True


def validate_count(value: str, minimum: int = 0) -> bool:
    return value.strip().isdecimal() and int(value) >= minimum


def run_interactive() -> int:
    """Мастер заполнения/проверки дерева."""
    console.rule("[bold yellow]📦 fspopulate[/bold yellow]")

    action = questionary.select(
        "Что сделать?",
        choices=["Заполнить дерево", "Проверить дерево", "Выход"],
    ).ask()
    if action is None or action == "Выход":
        return EXIT_OK

    path = questionary.path(
        "Укажите путь к корню дерева:",
        completer=path_completer,
        validate=lambda p: (bool(p) and Path(p).expanduser().parent.exists()) or "Родительская директория не найдена",
    ).ask()
    if not path:
        return EXIT_USAGE

    size = questionary.text(
        "Суммарный размер (например, 500m, 10g, 1t):",
        default="1g",
        validate=lambda v: validate_size_format(v) or "Неверный формат. Используйте: 500m, 10g, 1t",
    ).ask()
    if not size:
        return EXIT_USAGE
    total_size = parse_size(size)

    bulk_files = DEFAULT_BULK_FILES
    subdirs = DEFAULT_SUBDIRS
    bulk_size = total_size // BULK_SIZE_DIVISOR
    if questionary.confirm("Изменить политику (количество файлов и каталогов)?", default=False).ask():
        bulk_files_str = questionary.text(
            "Количество больших файлов:",
            default=str(bulk_files),
            validate=lambda v: validate_count(v) or "Введите целое число >= 0",
        ).ask()
        subdirs_str = questionary.text(
            "Количество подкаталогов:",
            default=str(subdirs),
            validate=lambda v: validate_count(v, 1) or "Введите целое число >= 1",
        ).ask()
        bulk_size_str = questionary.text(
            "Размер большого файла:",
            default=str(bulk_size),
            validate=lambda v: validate_size_format(v) or "Неверный формат. Используйте: 64m, 1g",
        ).ask()
        if bulk_files_str is None or subdirs_str is None or bulk_size_str is None:
            return EXIT_USAGE
        bulk_files = int(bulk_files_str)
        subdirs = int(subdirs_str)
        bulk_size = parse_size(bulk_size_str)

    config = PopulationConfig(
        path=Path(path).expanduser(),
        total_size=total_size,
        bulk_files=bulk_files,
        bulk_size=bulk_size,
        subdirs=subdirs,
    )

    console.print("\n[bold]Параметры:[/bold]")
    summary_table = Table(show_header=False, box=None)
    summary_table.add_column(style="cyan")
    summary_table.add_column(style="white")
    summary_table.add_row("Путь:", str(config.path))
    summary_table.add_row("Размер:", f"{config.total_size} ({format_bytes(config.total_size)})")
    summary_table.add_row("Больших файлов:", str(config.bulk_files))
    summary_table.add_row("Размер большого:", format_bytes(config.bulk_size))
    summary_table.add_row("Подкаталогов:", str(config.subdirs))
    console.print(summary_table)

    # ask() возвращает None при Ctrl-C
    proceed = questionary.confirm("\nПродолжить?", default=True).ask()
    if proceed is None:
        console.print(INTERRUPTED_MESSAGE)
        return EXIT_FAILURE
    if not proceed:
        console.print("[yellow]Отменено.[/yellow]")
        return EXIT_OK

    try:
        if action == "Проверить дерево":
            return run_verify(config)
        return run_populate(config)
    except KeyboardInterrupt:
        console.print(INTERRUPTED_MESSAGE)
        return EXIT_FAILURE
