"""Procedure tools."""
from typing import Any, Dict

from ..client import InfoPluClient, path_segment
from ..pruning import prune_grid
from ..schemas import SearchProceduresInput
from .base import ToolSpec, fmt, render_json, render_lines

PROCEDURE_TYPE_LABELS = {
    "E": "Élaboration (initial creation)",
    "R": "Révision (full revision)",
    "RA": "Révision allégée (simplified revision)",
    "M": "Modification",
    "MS": "Modification simplifiée",
    "MEC": "Mise en compatibilité",
    "MAJ": "Mise à jour",
}


def _prune_procedure(raw: Dict[str, Any]) -> Dict[str, Any]:
    proc = dict(raw)
    if isinstance(proc.get("grid"), dict):
        proc["grid"] = prune_grid(proc["grid"])
    return proc


async def search_procedures(client: InfoPluClient, p: SearchProceduresInput) -> str:
    query: Dict[str, Any] = {"page": p.page, "limit": p.limit}
    if p.documentType:
        query["documentType"] = p.documentType
    if p.procedureType:
        query["procedureType"] = p.procedureType
    if p.approbedAfter:
        # upstream spelling
        query["approbedAfter"] = p.approbedAfter

    procedures = [
        _prune_procedure(proc)
        for proc in await client.get(f"/{path_segment(p.gridName)}/procedures", query)
    ]

    if not procedures:
        return (
            f'No procedures found for territory "{p.gridName}" with the given filters. '
            "Try removing the documentType or procedureType filter."
        )

    if p.response_format == "json":
        return render_json(client, {"count": len(procedures), "procedures": procedures})

    lines = [f"# Procedures for {p.gridName} — {len(procedures)} result(s)", ""]
    for proc in procedures:
        code = proc.get("procedureType")
        lines.append(f"## {fmt(proc.get('name'))}")
        lines.append(f"- **Document type**: {fmt(proc.get('documentType'))}")
        lines.append(f"- **Document**: {fmt(proc.get('documentName'))}")
        lines.append(f"- **Procedure type**: {PROCEDURE_TYPE_LABELS.get(code, fmt(code))}")
        if proc.get("approbationDate"):
            lines.append(f"- **Approved on**: {proc['approbationDate']}")
        g = proc.get("grid")
        if isinstance(g, dict):
            lines.append(f"- **Territory**: {fmt(g.get('title'))} ({fmt(g.get('name'))})")
        if proc.get("files"):
            lines.append(f"- **Files attached**: {len(proc['files'])}")
        lines.append("")
    return render_lines(client, lines)


TOOLS = [
    ToolSpec(
        name="infoplu_search_procedures",
        title="Search Urban Planning Procedures",
        description="""Search the urban planning procedures (procédures d'urbanisme) of a territory's documents.

A procedure is one administrative step in a document's life: creation (E), revision (R, RA), modification (M, MS), compatibility update (MEC) or administrative update (MAJ).

Args:
  - gridName (required): territory code, see infoplu_search_grids
  - documentType: "PLU", "PLUi", "CC", "POS", "PSMV", "SCoT"
  - procedureType: "E", "R", "RA", "M", "MS", "MEC", "MAJ"
  - approbedAfter: "YYYYMMDD"
  - page (from 1), limit (1-100, default 20)
  - response_format: "markdown" (default) or "json"

Returns "Error: Resource not found" when gridName does not exist.""",
        input_model=SearchProceduresInput,
        handler=search_procedures,
    ),
]
