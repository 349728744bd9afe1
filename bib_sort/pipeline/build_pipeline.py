from __future__ import annotations

from typing import Optional

from langgraph.graph import StateGraph, END

from .state import PipelineState, SortConfig
from .nodes.extract_keys import extract_keys_node
from .nodes.render import render_node
from .nodes.sort import sort_node
from .nodes.split import split_node


def build_pipeline():
    graph = StateGraph(PipelineState)
    graph.add_node("split", split_node)
    graph.add_node("extract_keys", extract_keys_node)
    graph.add_node("sort", sort_node)
    graph.add_node("render", render_node)

    graph.set_entry_point("split")
    graph.add_edge("split", "extract_keys")
    graph.add_edge("extract_keys", "sort")
    graph.add_edge("sort", "render")
    graph.add_edge("render", END)

    return graph.compile()


def run_pipeline(state: PipelineState) -> PipelineState:
    """Invoke the compiled graph; exceptions from a node abort the run unchanged."""
    result = build_pipeline().invoke(state)
    if isinstance(result, PipelineState):
        return result
    return PipelineState.model_validate(result)


def sort_bibtex(text: str, config: Optional[SortConfig] = None) -> str:
    """Sort bib *text* in memory and return the result."""
    state = PipelineState(config=config or SortConfig(), source_text=text)
    return run_pipeline(state).output_text
