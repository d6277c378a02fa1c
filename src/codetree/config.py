from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
import os
import tomllib
from typing import Any

DEFAULT_OUTPUT = "code_output.txt"
DEFAULT_IGNORED_DIRS = ".git,node_modules,target,.idea,venv,bin,obj,Debug,Release"
DEFAULT_EXTENSIONS = "rs,js,py,cpp,c,java,go,ts,cs,csproj,sln,cshtml,razor,json,xml,config,yml,yaml"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

def _expand(p: str) -> str:
    return os.path.expandvars(os.path.expanduser(p))

def parse_list(value: str | list[str] | tuple[str, ...]) -> tuple[str, ...]:
    """Split a comma-separated string (or normalize a list) into unique, non-empty items."""
    items = value.split(",") if isinstance(value, str) else list(value)
    out: list[str] = []
    for item in items:
        item = str(item).strip()
        if item and item not in out:
            out.append(item)
    return tuple(out)

@dataclass(frozen=True)
class TreeConfig:
    """Configuration for a single report run.

    Built once (from CLI flags and an optional TOML file) and handed to the
    scanner and reporter explicitly; never mutated afterwards.
    """

    root_path: Path = Path(".")
    output_file: Path = Path(DEFAULT_OUTPUT)

    ignored_dirs: tuple[str, ...] = field(default_factory=lambda: parse_list(DEFAULT_IGNORED_DIRS))
    allowed_extensions: tuple[str, ...] = field(default_factory=lambda: parse_list(DEFAULT_EXTENSIONS))

    verbose: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    def __post_init__(self):
        """Normalize paths and list fields so callers may pass plain strings."""
        if isinstance(self.root_path, str):
            object.__setattr__(self, 'root_path', Path(_expand(self.root_path)))
        if isinstance(self.output_file, str):
            object.__setattr__(self, 'output_file', Path(_expand(self.output_file)))
        object.__setattr__(self, 'ignored_dirs', parse_list(self.ignored_dirs))
        object.__setattr__(self, 'allowed_extensions', parse_list(self.allowed_extensions))

        level = self.log_level.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}.")
        object.__setattr__(self, 'log_level', level)

    def with_overrides(self, **changes: Any) -> "TreeConfig":
        """Return a copy with every non-None value in `changes` applied."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes)

    @staticmethod
    def from_toml(path: str | Path) -> "TreeConfig":
        data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
        scan = data.get("scan", {})
        logging_config = data.get("logging", {})

        if not isinstance(scan, dict):
            raise ValueError("Invalid config: [scan] must be a table")

        log_file = logging_config.get("file")
        if log_file is not None:
            log_file = _expand(str(log_file))

        return TreeConfig(
            root_path=Path(_expand(str(scan.get("root", ".")))),
            output_file=Path(_expand(str(scan.get("output", DEFAULT_OUTPUT)))),
            ignored_dirs=parse_list(scan.get("ignore", DEFAULT_IGNORED_DIRS)),
            allowed_extensions=parse_list(scan.get("extensions", DEFAULT_EXTENSIONS)),
            verbose=bool(scan.get("verbose", False)),
            log_level=str(logging_config.get("level", "INFO")),
            log_file=log_file,
        )


def load_config(path: str | Path | None) -> TreeConfig:
    """Load configuration from a TOML file, or return the defaults when no file is given."""
    if path is None:
        return TreeConfig()
    p = Path(path)
    if not p.is_file():
        raise ValueError(f"Config file not found: {p}")
    return TreeConfig.from_toml(p)
