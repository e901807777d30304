"""Output and diagnostics with strict stdout/stderr discipline.

* **stdout** carries data only: decoded API payloads, resource tables,
  resolved URLs.
* **stderr** carries diagnostics: request lines, selected security schemes,
  host overrides, warnings and errors.

Rich formatting is used when stdout is an interactive terminal and colour is
allowed (``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` all turn it off).

Library code never prints directly; it calls the module-level helpers
(:func:`debug`, :func:`info`, :func:`warning`, :func:`error`) which delegate
to one global :class:`OutputManager`. The CLI installs a configured manager
with :func:`set_output`; library users get a quiet default.

Secret values must never reach this module. Callers log header *names* and a
has-value flag only.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Callable, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text


class OutputFormat(str, Enum):
    """Data format for stdout. ``AUTO`` picks ``RICH`` on a colour TTY, else ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# level -> (plain prefix, rich style of the prefix)
_LEVELS: dict[str, tuple[str, str]] = {
    "info": ("", ""),
    "warning": ("Warning: ", "yellow"),
    "error": ("Error: ", "bold red"),
    "debug": ("[debug] ", "dim"),
}


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        format: Desired data format; ``AUTO`` is resolved at construction.
        no_color: Disable colour and Rich styling.
        quiet: Drop ``info`` diagnostics. Warnings and errors still print.
        verbose: Emit ``debug`` diagnostics.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._format = _resolve_format(format, self._no_color)

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)
        self._renderers: dict[OutputFormat, Callable[[Any], None]] = {
            OutputFormat.JSON: lambda data: self.print_data(_to_json(data)),
            OutputFormat.PLAIN: self._render_plain,
            OutputFormat.RICH: self._render_rich,
        }

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Write one line of raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def format_response(self, data: Any) -> None:
        """Render a decoded response payload in the active format."""
        self._renderers[self._format](data)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a JSON array of objects, TSV, or a Rich table."""
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows]))
            return
        if self._format == OutputFormat.PLAIN:
            for line in (headers, *rows):
                self.print_data("\t".join(line))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    def _render_plain(self, data: Any) -> None:
        if isinstance(data, dict):
            lines = [f"{key}\t{value}" for key, value in data.items()]
        elif isinstance(data, list):
            lines = [
                "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
                for item in data
            ]
        else:
            lines = [str(data)]
        for line in lines:
            self.print_data(line)

    def _render_rich(self, data: Any) -> None:
        if isinstance(data, (dict, list)):
            self._stdout.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(data), markup=False)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        self._emit("info", message)

    def warning(self, message: str) -> None:
        self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def debug(self, message: str) -> None:
        self._emit("debug", message)

    def _emit(self, level: str, message: str) -> None:
        if level == "info" and self._quiet:
            return
        if level == "debug" and not self._verbose:
            return

        prefix, style = _LEVELS[level]
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        elif level == "debug":
            self._stderr.print(Text(f"{prefix}{message}", style=style))
        else:
            self._stderr.print(Text.assemble((prefix, style), message))


# ------------------------------------------------------------------ #
# Environment detection
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested != OutputFormat.AUTO:
        return requested
    return OutputFormat.RICH if _is_tty() and not no_color else OutputFormat.PLAIN


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global manager, creating a quiet plain-text one if none is set."""
    global _output
    if _output is None:
        _output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the global manager so the next :func:`get_output` builds a fresh one."""
    global _output
    _output = None


def info(message: str) -> None:
    get_output().info(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
