import argparse
from typing import List, Optional, Tuple

from .config import PopulateConfigModel, PopulationConfig, load_populate_config, resolve_population_config
from .dataset import PopulateError, populate, verify
from .report import ProgressPrinter, print_error, print_result, print_summary, print_verify, write_report

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    top_level_epilog = """
Быстрые примеры:

  # Заполнить ./tree файлами общим размером 1 TiB
  fspopulate populate 1t ./tree

  # Посмотреть план без записи на диск
  fspopulate populate 50g ./tree --dry-run

  # Проверить, что дерево полностью заполнено
  fspopulate verify 1t ./tree
"""
    parser = argparse.ArgumentParser(
        prog="fspopulate",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="Детерминированное и идемпотентное заполнение каталога файлами для тестирования хранилищ",
        epilog=top_level_epilog,
    )
    parser.add_argument("--interactive", "-i", action="store_true", help="Запустить интерактивный мастер")
    sub = parser.add_subparsers(dest="cmd", required=False)

    populate_epilog = """
Примеры:

  # 768 файлов по total/1024 и остаток файлами по 10 MiB в 256 каталогах
  fspopulate populate 100g /mnt/test/tree

  # Параметры из конфига, размер переопределён через CLI
  fspopulate populate 2t --config populate.yaml

  # Прерванный запуск просто повторяется с теми же параметрами:
  # уже записанные байты не перезаписываются
"""
    pop = sub.add_parser(
        "populate",
        help="Создать или дозаполнить дерево файлов",
        epilog=populate_epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_sizing_arguments(pop)
    pop.add_argument("--dry-run", dest="dry_run", action=argparse.BooleanOptionalAction, default=None, help="Только показать параметры и план, ничего не создавать (--no-dry-run отменяет dry_run из конфига)")
    pop.add_argument("--report", default=None, help="Путь к JSON файлу с итоговым отчётом")

    ver = sub.add_parser(
        "verify",
        help="Проверить размеры файлов в дереве, ничего не записывая",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_sizing_arguments(ver)
    return parser


def _add_sizing_arguments(p: argparse.ArgumentParser):
    p.add_argument("size", nargs="?", default=None, help="Суммарный размер (например, 500m, 10g, 1t; суффиксы k/m/g/t — степени 1024)")
    p.add_argument("path", nargs="?", default=None, help="Корневой каталог дерева")
    p.add_argument("--config", help="YAML-файл с параметрами (path, size, bulk_files, bulk_size, subdirs). Параметры CLI имеют приоритет")
    p.add_argument("--bulk-files", dest="bulk_files", type=int, default=None, help="Количество больших файлов (по умолчанию: 768)")
    p.add_argument("--bulk-size", dest="bulk_size", default=None, help="Размер большого файла (по умолчанию: размер / 1024)")
    p.add_argument("--subdirs", type=int, default=None, help="Количество подкаталогов (по умолчанию: 256)")


def _resolve(args) -> Tuple[Optional[PopulationConfig], Optional[PopulateConfigModel]]:
    config_model = None
    if getattr(args, "config", None):
        try:
            config_model = load_populate_config(args.config)
        except (OSError, ValueError) as exc:
            print_error(f"Не удалось прочитать конфиг: {exc}")
            return None, None
    try:
        return resolve_population_config(args, config_model), config_model
    except ValueError as exc:
        print_error(f"Ошибка параметров: {exc}")
        return None, config_model


def run_populate(config: PopulationConfig, report: Optional[str] = None) -> int:
    print_summary(config)
    try:
        result = populate(config, progress=ProgressPrinter())
    except PopulateError as exc:
        print_error(str(exc))
        return EXIT_FAILURE
    print_result(result)
    if report:
        try:
            write_report(report, config, result)
        except OSError as exc:
            print_error(f"Не удалось записать отчёт {report}: {exc}")
            return EXIT_FAILURE
    return EXIT_OK


def run_verify(config: PopulationConfig) -> int:
    print_summary(config)
    try:
        result = verify(config)
    except PopulateError as exc:
        print_error(str(exc))
        return EXIT_FAILURE
    print_verify(result)
    return EXIT_OK if result.ok else EXIT_FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.interactive or args.cmd is None:
        # Импорт здесь: questionary тянет prompt_toolkit, в обычном режиме он не нужен
        from .interactive import run_interactive
        return run_interactive()

    config, config_model = _resolve(args)
    if config is None:
        return EXIT_USAGE

    if args.cmd == "populate":
        report = args.report
        if report is None and config_model is not None:
            report = config_model.report
        return run_populate(config, report=report)
    return run_verify(config)
