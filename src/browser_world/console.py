"""Readable console output for step definitions."""

from __future__ import annotations

from typing import Any, Optional

from rich.console import Console


class ConsoleTracer:
    """Print highlighted trace blocks, exposed to steps as ``context.trace``."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console or Console()

    def __call__(self, *args: Any) -> None:
        body = ",".join(str(arg) for arg in args)
        self._console.print(f"\n>>>>> \n{body}\n<<<<<\n", style="white on blue", markup=False)

    def status(self, message: str, level: str = "info") -> None:
        style = {
            "info": "cyan",
            "warning": "yellow",
            "error": "red",
            "success": "green",
        }.get(level, "white")
        self._console.print(f"[{level.upper()}] {message}", style=style, markup=False)
