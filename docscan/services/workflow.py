from langgraph.graph import StateGraph, END
from docscan.services.states import ScanState
from docscan.services.nodes import (
    resolve_document,
    download_document,
    extract_ocr,
    validate_document,
    persist_validation,
)


def _continue_or_stop(state: ScanState) -> str:
    return "stop" if state.get("error") else "continue"


def build_scan_graph():
    """Build and compile the LangGraph workflow for a document scan"""
    workflow = StateGraph(ScanState)

    workflow.add_node("resolve_document", resolve_document)
    workflow.add_node("download_document", download_document)
    workflow.add_node("extract_ocr", extract_ocr)
    workflow.add_node("validate_document", validate_document)
    workflow.add_node("persist_validation", persist_validation)

    # resolve -> download -> ocr -> validate -> persist; the first three may stop the run
    workflow.set_entry_point("resolve_document")
    workflow.add_conditional_edges(
        "resolve_document", _continue_or_stop, {"continue": "download_document", "stop": END}
    )
    workflow.add_conditional_edges(
        "download_document", _continue_or_stop, {"continue": "extract_ocr", "stop": END}
    )
    workflow.add_conditional_edges(
        "extract_ocr", _continue_or_stop, {"continue": "validate_document", "stop": END}
    )
    workflow.add_edge("validate_document", "persist_validation")
    workflow.add_edge("persist_validation", END)

    return workflow.compile()

scan_graph = build_scan_graph()
