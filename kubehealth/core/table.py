"""Plain-text bordered tables."""

from typing import List


class SimpleTable:
    """Bordered grid sized to its content."""

    def __init__(self, headers: List[str]):
        self.headers = list(headers)
        self.rows: List[List[str]] = []

    def add_row(self, row: List[str]):
        self.rows.append([str(cell) for cell in row])

    def column_widths(self) -> List[int]:
        widths = [len(header) for header in self.headers]
        for row in self.rows:
            for i, cell in enumerate(row[: len(widths)]):
                widths[i] = max(widths[i], len(cell))
        return widths

    def render(self) -> str:
        """Render headers and rows; empty when there are no headers."""
        if not self.headers:
            return ""

        widths = self.column_widths()
        separator = "+" + "+".join("-" * (width + 2) for width in widths) + "+"

        lines = [separator, self._format_row([h.upper() for h in self.headers], widths), separator]
        lines.extend(self._format_row(row, widths) for row in self.rows)
        lines.append(separator)
        return "\n".join(lines)

    @staticmethod
    def _format_row(row: List[str], widths: List[int]) -> str:
        # Short rows stop after their last cell; extra cells are dropped
        cells = [f" {cell:<{width}} |" for cell, width in zip(row, widths)]
        return "|" + "".join(cells)

    def __str__(self) -> str:
        return self.render()
