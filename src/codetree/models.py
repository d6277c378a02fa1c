from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

@dataclass(frozen=True)
class FileEntry:
    """One node visited during a scan.

    `path` keeps the form produced by joining names onto the root as given
    (e.g. `./src/main.rs` when the root is `.`), which is what the report shows.
    """
    path: str
    name: str
    is_file: bool
    depth: int
    is_dir: bool = False

@dataclass(frozen=True)
class ReportStats:
    total_files: int
    code_files: int
    files_written: int = 0
    read_errors: int = 0
    output_file: Path | None = None
