from __future__ import annotations

from ..state import PipelineState
from ...tools.bibtex_io import render_bibtex
from ...tools.logger import get_logger

logger = get_logger(__name__)


def render_node(state: PipelineState) -> PipelineState:
    logger.info("[render] Assembling sorted document")
    state.output_text = render_bibtex(state.document, state.sorted_entries)
    return state
