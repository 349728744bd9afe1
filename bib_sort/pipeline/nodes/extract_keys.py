from __future__ import annotations

from ..state import PipelineState
from ...tools.keys import with_keys
from ...tools.logger import get_logger

logger = get_logger(__name__)


def extract_keys_node(state: PipelineState) -> PipelineState:
    logger.info("[keys] Extracting citation keys")
    state.document.entries = with_keys(state.document.entries)
    for entry in state.document.entries:
        logger.debug("[keys] line %d: %s", entry.line, entry.key)
    return state
