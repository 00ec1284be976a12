"""Exception hierarchy for plotxy.

PlotxyError is the root. Every failure that aborts a run derives from it so
the CLI and the HTTP service can report it without a traceback.
"""

from __future__ import annotations

from typing import Optional


class PlotxyError(Exception):
    """Root exception for the entire project."""


class IoError(PlotxyError):
    """Input cannot be opened/read, or output cannot be written."""


class ParseError(PlotxyError):
    """Delimited text could not be turned into a table."""


class OptionError(PlotxyError):
    """An option value is out of range or malformed."""


class InvalidColumnIndex(PlotxyError):
    def __init__(self, index: int, column_count: int, axis: str = "") -> None:
        self.index = index
        self.column_count = column_count
        self.axis = axis
        where = f" for {axis}" if axis else ""
        super().__init__(
            f"Column index {index}{where} is out of range: "
            f"expected 0 (row index) or 1..{column_count}"
        )


class InvalidData(PlotxyError):
    """A column is unusable where numbers are required, or a domain is degenerate."""


class InvalidColorFormat(PlotxyError):
    def __init__(self, value: str, reason: Optional[str] = None) -> None:
        self.value = value
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Invalid color {value!r}: expected 6 hex digits like 1E88E5{detail}")


class RenderError(PlotxyError):
    """The drawing backend failed to produce an image."""
