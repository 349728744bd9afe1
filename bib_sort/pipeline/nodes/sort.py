from __future__ import annotations

from ..state import PipelineState
from ...tools.logger import get_logger
from ...tools.sorting import sort_entries

logger = get_logger(__name__)


def sort_node(state: PipelineState) -> PipelineState:
    config = state.config
    logger.info(
        "[sort] Sorting by %s (%s)",
        config.sort_by,
        "case sensitive" if config.case_sensitive else "case insensitive",
    )
    state.sorted_entries = sort_entries(
        state.document.entries,
        case_sensitive=config.case_sensitive,
        sort_by=config.sort_by,
    )
    moved = sum(1 for pos, e in enumerate(state.sorted_entries) if e.index != pos)
    logger.info("[sort] %d of %d entries changed position", moved, len(state.sorted_entries))
    return state
