"""Urban planning document tools: search, details, written pieces."""
from typing import Any, Dict, List

from ..client import InfoPluClient, path_segment
from ..pruning import prune_document
from ..schemas import DocumentFilesInput, DocumentIdInput, SearchDocumentsInput
from .base import ToolSpec, fmt, render_json, render_lines


def _territory_line(doc: Dict[str, Any]) -> List[str]:
    g = doc.get("grid")
    if not isinstance(g, dict):
        return []
    return [f"- **Territory**: {fmt(g.get('title'))} ({fmt(g.get('name'))}) — {fmt(g.get('type'))}"]


def _file_line(f: Dict[str, Any]) -> str:
    return f"- **{fmt(f.get('title') or f.get('name'))}** — `{fmt(f.get('path'))}`"


async def search_documents(client: InfoPluClient, p: SearchDocumentsInput) -> str:
    query: Dict[str, Any] = {"page": p.page, "limit": p.limit}
    if p.documentFamily:
        query["documentFamily"] = list(p.documentFamily)
    if p.documentType:
        query["documentType"] = list(p.documentType)
    if p.partition:
        query["partition"] = p.partition
    if p.legalStatus:
        query["legalStatus"] = p.legalStatus
    if p.uploadedAfter:
        query["uploadedAfter"] = p.uploadedAfter

    docs = await client.get("/document", query)

    if not docs:
        return (
            "No documents found matching the given filters. Try removing legalStatus, "
            "changing documentType, or searching by territory with infoplu_search_grids first."
        )

    docs = [prune_document(d) for d in docs]

    if p.response_format == "json":
        return render_json(client, {"count": len(docs), "documents": docs})

    lines = [f"# Documents d'Urbanisme — {len(docs)} result(s)", ""]
    for doc in docs:
        heading = doc.get("originalName") or doc.get("name") or doc.get("id")
        lines.append(f"## {fmt(heading)}")
        lines.append(f"- **ID**: `{fmt(doc.get('id'))}`")
        lines.append(f"- **Type**: {fmt(doc.get('type'))}")
        lines.append(f"- **Legal status**: {fmt(doc.get('legalStatus'))}")
        lines.append(f"- **Processing status**: {fmt(doc.get('status'))}")
        lines.extend(_territory_line(doc))
        lines.append(f"- **Uploaded**: {fmt(doc.get('uploadDate'))}  |  **Updated**: {fmt(doc.get('updateDate'))}")
        if doc.get("fileIdentifier"):
            lines.append(f"- **File identifier**: {doc['fileIdentifier']}")
        lines.append("")
    return render_lines(client, lines)


async def get_document_details(client: InfoPluClient, p: DocumentIdInput) -> str:
    raw = await client.get(f"/document/{path_segment(p.documentId)}/details")
    doc = prune_document(raw)

    if p.response_format == "json":
        return render_json(client, doc)

    heading = doc.get("title") or doc.get("originalName") or doc.get("id")
    lines = [
        f"# {fmt(heading)}",
        "",
        f"- **ID**: `{fmt(doc.get('id'))}`",
        f"- **Type**: {fmt(doc.get('type'))}",
        f"- **Legal status**: {fmt(doc.get('legalStatus'))}",
        f"- **Processing status**: {fmt(doc.get('status'))} (since {fmt(doc.get('statusDate'))})",
        f"- **Partition**: {fmt(doc.get('name'))}",
    ]
    lines.extend(_territory_line(doc))
    lines.append(f"- **Uploaded**: {fmt(doc.get('uploadDate'))}  |  **Updated**: {fmt(doc.get('updateDate'))}")

    optional = (
        ("producer", "Producer"),
        ("projectionCode", "Projection"),
        ("typeref", "Cadastral reference"),
        ("archiveUrl", "Archive URL"),
    )
    for key, label in optional:
        if doc.get(key):
            lines.append(f"- **{label}**: {doc[key]}")
    if doc.get("protected") is not None:
        lines.append(f"- **Download restricted**: {'Yes' if doc['protected'] else 'No'}")
    if doc.get("fileIdentifier"):
        lines.append(f"- **File identifier**: {doc['fileIdentifier']}")

    files = doc.get("files") or []
    if files:
        lines.extend(["", f"## Attached Written Pieces ({len(files)})"])
        lines.extend(_file_line(f) for f in files)

    materials = doc.get("writingMaterials") or {}
    if materials:
        lines.extend(["", "## Writing Materials (URLs)"])
        for name, url in materials.items():
            lines.append(f"- **{name}**: {url}")

    return render_lines(client, lines)


async def list_document_files(client: InfoPluClient, p: DocumentFilesInput) -> str:
    files = await client.get(f"/document/{path_segment(p.documentId)}/files")

    if not files:
        return (
            f"No written pieces found for document `{p.documentId}`. The document may have "
            "no attached files or may not be in production status."
        )

    lines = [
        f"# Written Pieces for Document `{p.documentId}`",
        f"{len(files)} file(s) attached:",
        "",
    ]
    lines.extend(_file_line(f) for f in files)
    return render_lines(client, lines)


TOOLS = [
    ToolSpec(
        name="infoplu_search_documents",
        title="Search Urban Planning Documents",
        description="""Search and filter urban planning documents (PLU, PLUi, POS, CC, PSMV, SUP, SCoT) of the Géoportail de l'Urbanisme.

Entry point for most workflows: returns document IDs to pass to infoplu_get_document_details.

Args:
  - documentFamily: any of "DU" (PLU/PLUi/CC/POS), "PSMV", "SUP", "SCoT"
  - documentType: any of "PLU", "PLUi", "CC", "POS", "PSMV", "SUP", "SCoT"
  - partition: exact partition code (e.g., "69123_PLU_20220101")
  - legalStatus: "APPROVED", "PENDING", "REJECTED" or "UNKNOWN"
  - uploadedAfter: "YYYYMMDD"
  - page (from 0), limit (1-100, default 20)
  - response_format: "markdown" (default) or "json"

Examples:
  - all approved DU: documentFamily=["DU"], legalStatus="APPROVED"
  - recent uploads: uploadedAfter="20240101" (YYYYMMDD)""",
        input_model=SearchDocumentsInput,
        handler=search_documents,
    ),
    ToolSpec(
        name="infoplu_get_document_details",
        title="Get Document Details",
        description="""Get the full details of one urban planning document by its 32-character hex ID.

Includes title, producer, projection, cadastral reference type, attached written pieces (règlement, rapport de présentation, annexes), writing material URLs, archive URL and whether download is restricted.""",
        input_model=DocumentIdInput,
        handler=get_document_details,
    ),
    ToolSpec(
        name="infoplu_list_document_files",
        title="List Document Written Pieces",
        description="""List the written pieces (pièces écrites) attached to a document: règlement, rapport de présentation, PADD, annexes...

Each file has a name, an optional human title and a relative path.""",
        input_model=DocumentFilesInput,
        handler=list_document_files,
    ),
]
