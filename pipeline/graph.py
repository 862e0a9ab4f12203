from langgraph.graph import StateGraph, END

from pipeline.settings import Settings
from pipeline.state import RecognizeState
from pipeline.nodes import (
    node_allocate,
    node_fetch,
    node_recognize,
    node_collect,
)


def stop_on_error(next_node: str):
    """Router factory: go to `next_node` unless the last node failed."""

    def route(state):
        if state.get("error"):
            return END
        return next_node

    return route


def build_graph(settings: Settings):
    workflow = StateGraph(RecognizeState)

    def allocate(state: RecognizeState):
        return node_allocate(state, settings)

    def fetch(state: RecognizeState):
        return node_fetch(state, settings)

    def recognize(state: RecognizeState):
        return node_recognize(state, settings)

    def collect(state: RecognizeState):
        return node_collect(state, settings)

    workflow.add_node("allocate", allocate)
    workflow.add_node("fetch", fetch)
    workflow.add_node("recognize", recognize)
    workflow.add_node("collect", collect)

    workflow.set_entry_point("allocate")

    # allocate -> fetch -> recognize -> collect, bailing out on the first error
    for node, next_node in (
        ("allocate", "fetch"),
        ("fetch", "recognize"),
        ("recognize", "collect"),
    ):
        workflow.add_conditional_edges(
            node,
            stop_on_error(next_node),
            {next_node: next_node, END: END},
        )

    workflow.add_edge("collect", END)

    return workflow.compile()
