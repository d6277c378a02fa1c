from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TextIO

import typer

from .config import TreeConfig
from .models import FileEntry, ReportStats
from .progress import NullProgress, ScanProgress
from .scanner import count_files, display, is_matched, walk_entries

logger = logging.getLogger(__name__)

TITLE = "Directory Tree and Code Contents"
BRANCH = "├── "
INDENT = "    "


@dataclass
class Reporter:
    """Write a tree listing plus matched file contents for one configured root.

    Runs three independent traversals (count, tree, contents) so the totals
    are known before the progress bar is created. Directory-level I/O errors
    propagate; unreadable files are reported inline and skipped.
    """
    cfg: TreeConfig
    progress: ScanProgress = field(default_factory=NullProgress)

    def __post_init__(self) -> None:
        self.allowed = frozenset(self.cfg.allowed_extensions)
        self.ignored = frozenset(self.cfg.ignored_dirs)
        # Keep the report out of its own listing when it is written inside the root.
        self.exclude = (self.cfg.output_file,)

    def _walk(self):
        return walk_entries(self.cfg.root_path, self.ignored, self.exclude)

    def generate(self) -> ReportStats:
        cfg = self.cfg
        total_files, code_files = count_files(cfg.root_path, self.ignored, self.allowed, self.exclude)
        logger.info(f"Found {total_files} files ({code_files} code files) under {display(cfg.root_path)}")
        if cfg.verbose:
            typer.echo(f"Total files: {total_files}, Code files: {code_files}")

        self.progress.start(total_files)
        message = "Scan failed"
        try:
            # newline="" keeps file contents byte-for-byte on every platform
            with open(cfg.output_file, "w", encoding="utf-8", newline="") as out:
                self._write_header(out, total_files, code_files)
                self._write_tree(out)
                files_written, read_errors = self._write_contents(out)
            message = "Scan complete"
        finally:
            self.progress.finish(message)

        logger.info(f"Wrote {files_written} file blocks to {cfg.output_file} ({read_errors} read errors)")
        return ReportStats(
            total_files=total_files,
            code_files=code_files,
            files_written=files_written,
            read_errors=read_errors,
            output_file=cfg.output_file,
        )

    def _write_header(self, out: TextIO, total_files: int, code_files: int) -> None:
        out.write(f"{TITLE}\n\n")
        out.write(f"Root Directory: {display(self.cfg.root_path)}\n\n")
        out.write(f"Total Files: {total_files}\n\n")
        out.write(f"Code Files: {code_files}\n\n")

    def _write_tree(self, out: TextIO) -> None:
        for entry in self._walk():
            out.write(f"{INDENT * entry.depth}{BRANCH}{display(entry.name)}\n")

    def _write_contents(self, out: TextIO) -> tuple[int, int]:
        out.write("\nCode Contents:\n\n")
        files_written = 0
        read_errors = 0
        for entry in self._walk():
            if not entry.is_file:
                continue
            self.progress.advance()
            if not is_matched(entry, self.allowed):
                continue

            out.write(f"\n=== File: {display(entry.path)} ===\n\n")
            if not self._write_file(out, entry):
                read_errors += 1
            files_written += 1
        return files_written, read_errors

    def _write_file(self, out: TextIO, entry: FileEntry) -> bool:
        try:
            with open(entry.path, encoding="utf-8", newline="") as f:
                contents = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {display(entry.path)}: {display(str(e))}")
            out.write(f"Error reading file: {display(str(e))}\n")
            return False
        out.write(f"{contents}\n")
        return True


def generate(config: TreeConfig, progress: ScanProgress | None = None) -> ReportStats:
    """Generate the report described by `config`; see `Reporter`."""
    reporter = Reporter(config) if progress is None else Reporter(config, progress)
    return reporter.generate()
