from __future__ import annotations

import re
from argparse import Namespace
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

# Базовая политика: 768 "больших" файлов по total/1024 (75% объёма),
# остальное добивается файлами по 10 MiB, всё раскладывается по 256 каталогам.
DEFAULT_BULK_FILES = 768
DEFAULT_SUBDIRS = 256
BULK_SIZE_DIVISOR = 1024

UNITS = {
    "k": 1024,
    "m": 1024**2,
    "g": 1024**3,
    "t": 1024**4,
}

_SIZE_RE = re.compile(r"^(\d+)\s*([kmgt])?b?$")


def parse_size(s: Union[str, int]) -> int:
    """Разбирает размер вида "1024", "10m", "5G", "1TB" в байты."""
    if isinstance(s, bool):
        raise ValueError(f"unsupported size: {s!r}")
    if isinstance(s, int):
        if s < 0:
            raise ValueError(f"unsupported size: {s!r}")
        return s
    text = str(s).strip().lower()
    m = _SIZE_RE.match(text)
    if m is None or (m.group(2) is None and text.endswith("b")):
        raise ValueError(f'unsupported size: "{s}"')
    value = int(m.group(1))
    if m.group(2):
        value *= UNITS[m.group(2)]
    return value


class PopulateConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: Optional[str] = None
    size: Optional[Union[int, str]] = Field(
        default=None,
        validation_alias=AliasChoices("size", "total_size", "total-size"),
    )
    bulk_files: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("bulk_files", "bulk-files"),
    )
    bulk_size: Optional[Union[int, str]] = Field(
        default=None,
        validation_alias=AliasChoices("bulk_size", "bulk-size"),
    )
    subdirs: Optional[int] = Field(default=None, ge=1)
    dry_run: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("dry_run", "dry-run"),
    )
    report: Optional[str] = None


@dataclass(frozen=True)
class PopulationConfig:
    path: Path
    total_size: int
    bulk_files: int = DEFAULT_BULK_FILES
    bulk_size: int = 0
    subdirs: int = DEFAULT_SUBDIRS
    dry_run: bool = False

    def __post_init__(self):
        if self.total_size < 0:
            raise ValueError("total size must be >= 0")
        if self.bulk_files < 0:
            raise ValueError("bulk file count must be >= 0")
        if self.bulk_size < 0:
            raise ValueError("bulk file size must be >= 0")
        if self.subdirs < 1:
            raise ValueError("subdirectory count must be >= 1")

    @classmethod
    def with_defaults(cls, path: Union[str, Path], total_size: int, dry_run: bool = False) -> "PopulationConfig":
        return cls(
            path=Path(path),
            total_size=total_size,
            bulk_files=DEFAULT_BULK_FILES,
            bulk_size=total_size // BULK_SIZE_DIVISOR,
            subdirs=DEFAULT_SUBDIRS,
            dry_run=dry_run,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["path"] = str(self.path)
        return out


def load_populate_config(path: str) -> PopulateConfigModel:
    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with config_path.open("r", encoding="utf-8") as fh:
        try:
            parsed = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Config file {config_path} is not valid YAML: {exc}") from exc
    if isinstance(parsed, dict) and "populate" in parsed and isinstance(parsed["populate"], dict):
        parsed = parsed["populate"]
    if not isinstance(parsed, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping at the top level.")
    try:
        return PopulateConfigModel(**parsed)
    except ValidationError as exc:
        raise ValueError(f"Invalid populate configuration in {config_path}: {exc}") from exc


def resolve_population_config(cli_args: Namespace, config: Optional[PopulateConfigModel]) -> PopulationConfig:
    """Собирает PopulationConfig: сначала CLI, потом конфиг, потом политика по умолчанию."""
    def pick(name: str, default=None):
        cli_value = getattr(cli_args, name, None)
        if cli_value is not None:
            return cli_value
        if config is not None:
            conf_value = getattr(config, name)
            if conf_value is not None:
                return conf_value
        return default

    size = pick("size")
    if size is None:
        raise ValueError("missing size (pass SIZE or set 'size' in config file)")
    path = pick("path")
    if not path:
        raise ValueError("missing path (pass PATH or set 'path' in config file)")

    total_size = parse_size(size)
    bulk_size = pick("bulk_size")
    bulk_size = parse_size(bulk_size) if bulk_size is not None else total_size // BULK_SIZE_DIVISOR

    return PopulationConfig(
        path=Path(path).expanduser(),
        total_size=total_size,
        bulk_files=int(pick("bulk_files", default=DEFAULT_BULK_FILES)),
        bulk_size=bulk_size,
        subdirs=int(pick("subdirs", default=DEFAULT_SUBDIRS)),
        dry_run=bool(pick("dry_run", default=False)),
    )
