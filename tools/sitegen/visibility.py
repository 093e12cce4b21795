from __future__ import annotations

from typing import Tuple

from nbformat import NotebookNode

from .utils import _norm_text

_REMOVE_CELL = {"remove-cell", "hide-cell", "remove_cell", "hide_cell"}
_HIDE_INPUT = {"hide-input", "remove-input", "hide_input", "remove_input"}
_HIDE_OUTPUT = {"hide-output", "remove-output", "hide_output", "remove_output"}


def _cell_flags(cell: NotebookNode) -> Tuple[bool, bool, bool]:
    """Return (drop cell, hide source, hide outputs) for one cell."""
    md = cell.get("metadata") or {}
    tags = set(md.get("tags") or [])
    jup = md.get("jupyter") if isinstance(md.get("jupyter"), dict) else {}

    drop = bool(tags & _REMOVE_CELL)
    hide_src = bool(
        tags & _HIDE_INPUT or jup.get("source_hidden") or md.get("source_hidden")
    )
    hide_out = bool(
        tags & _HIDE_OUTPUT
        or jup.get("outputs_hidden")
        or md.get("outputs_hidden")
    )
    return drop, hide_src, hide_out


def _is_empty(cell: NotebookNode) -> bool:
    if _norm_text(cell.get("source", "")).strip():
        return False
    if cell.get("cell_type") == "markdown":
        return not cell.get("attachments")
    if cell.get("cell_type") == "code":
        return not cell.get("outputs")
    return True


def filter_and_apply_visibility(nb: NotebookNode) -> None:
    """Drop removed or empty cells and blank out hidden sources/outputs."""
    kept = []
    for cell in nb.cells:
        drop, hide_src, hide_out = _cell_flags(cell)
        kind = cell.get("cell_type")
        if drop or (hide_src and kind == "markdown"):
            continue
        if hide_src and kind == "code":
            cell["source"] = ""
        if hide_out and kind == "code":
            cell["outputs"] = []
            cell["execution_count"] = None
        if not _is_empty(cell):
            kept.append(cell)
    nb.cells = kept
