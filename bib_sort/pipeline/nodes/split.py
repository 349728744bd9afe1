from __future__ import annotations

from ..state import PipelineState
from ...tools.logger import get_logger
from ...tools.splitter import split_bibtex

logger = get_logger(__name__)


def split_node(state: PipelineState) -> PipelineState:
    logger.info("[split] Splitting %d characters into entries", len(state.source_text))
    state.document = split_bibtex(state.source_text)
    if state.document.preamble:
        logger.debug("[split] Keeping %d characters of preamble", len(state.document.preamble))
    logger.info("[split] Found %d entries", len(state.document.entries))
    return state
