"""Pure mapping from result records to display structures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mcp_search.types import ResultRecord

NO_CONTENT = "No content available"


@dataclass(slots=True)
class ResultView:
    index: int
    title: str
    content: str
    score: float | None
    metadata: dict[str, Any]


def present_results(records: list[ResultRecord]) -> list[ResultView]:
    views: list[ResultView] = []
    for index, record in enumerate(records, start=1):
        views.append(
            ResultView(
                index=index,
                title=f"Result #{index}",
                content=record.content or NO_CONTENT,
                # A zero score is hidden, same as a missing one.
                score=record.score if record.score else None,
                metadata=record.metadata,
            )
        )
    return views


def format_results_text(records: list[ResultRecord], max_length: int = 220) -> str:
    """Render results as one line per hit, for tool output and logs."""
    lines = []
    for view in present_results(records):
        snippet = _truncate(view.content.replace("\n", " "), max_length)
        if view.score is not None:
            lines.append(f"[{view.index}] score={view.score:.4f} {snippet}")
        else:
            lines.append(f"[{view.index}] {snippet}")
    if not lines:
        return "NO_RESULTS"
    return "\n".join(lines)


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."
