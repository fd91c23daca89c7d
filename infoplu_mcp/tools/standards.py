"""CNIG standards (document models) and reference code lists."""
from typing import Any, Dict, List

from ..client import InfoPluClient, path_segment
from ..schemas import DocumentModelInput, FormatOnlyInput, ListDocumentModelsInput
from .base import ToolSpec, fmt, render_json, render_lines


async def list_document_models(client: InfoPluClient, p: ListDocumentModelsInput) -> str:
    query: Dict[str, Any] = {}
    if p.type:
        query["type"] = p.type
    if p.abstract is not None:
        query["abstract"] = p.abstract

    models = await client.get("/standard", query)

    if not models:
        return "No document models found. Try removing the type or abstract filter."

    if p.response_format == "json":
        return render_json(client, models)

    lines = [f"# CNIG Document Models — {len(models)} result(s)", ""]
    for m in models:
        lines.append(f"## `{fmt(m.get('name'))}`")
        lines.append(f"- **Title**: {fmt(m.get('title'))}")
        lines.append(f"- **Type**: {fmt(m.get('type'))}")
        lines.append(f"- **Abstract**: {'Yes (generic base)' if m.get('abstract') else 'No (versioned)'}")
        if m.get("parent"):
            lines.append(f"- **Parent**: {m['parent']}")
        if m.get("description"):
            lines.append(f"- **Description**: {m['description']}")
        lines.append("")
    return render_lines(client, lines)


def attribute_table(attributes: List[Dict[str, Any]]) -> List[str]:
    lines = ["| Attribute | Type | Description |", "|-----------|------|-------------|"]
    for attr in attributes:
        desc = attr.get("description") or attr.get("title")
        lines.append(f"| `{fmt(attr.get('name'))}` | {fmt(attr.get('type'))} | {fmt(desc)} |")
    return lines


async def get_document_model(client: InfoPluClient, p: DocumentModelInput) -> str:
    model = await client.get(f"/standard/{path_segment(p.documentModel)}")

    if p.response_format == "json":
        return render_json(client, model)

    feature_types = model.get("featureTypes") or []
    lines = [
        f"# {fmt(model.get('name'))} — {fmt(model.get('title'))}",
        "",
        f"- **Type**: {fmt(model.get('type'))}",
        f"- **Abstract**: {'Yes' if model.get('abstract') else 'No'}",
    ]
    if model.get("parent"):
        lines.append(f"- **Parent model**: {model['parent']}")
    if model.get("description"):
        lines.extend(["", model["description"]])
    lines.extend(["", f"## Feature Types ({len(feature_types)})"])

    for ft in feature_types:
        lines.extend(["", f"### `{fmt(ft.get('name'))}` — {fmt(ft.get('title'))}"])
        if ft.get("description"):
            lines.append(f"_{ft['description']}_")
        if ft.get("attributes"):
            lines.append("")
            lines.extend(attribute_table(ft["attributes"]))
    return render_lines(client, lines)


async def list_sup_categories(client: InfoPluClient, p: FormatOnlyInput) -> str:
    categories = await client.get("/standard/sup-categories")

    if p.response_format == "json":
        return render_json(client, categories)

    lines = [f"# SUP Categories — {len(categories)} total", ""]
    for c in categories:
        dl = " `[downloadable]`" if c.get("downloadable") else ""
        lines.append(f"- **{fmt(c.get('name'))}** — {fmt(c.get('libelle'))} *({fmt(c.get('libelleCourt'))})*{dl}")
    return render_lines(client, lines)


async def list_du_categories(client: InfoPluClient, p: FormatOnlyInput) -> str:
    categories = await client.get("/standard/du-categories")

    if p.response_format == "json":
        return render_json(client, categories)

    # group by document type, first-seen order
    by_type: Dict[str, List[Dict[str, Any]]] = {}
    for c in categories:
        by_type.setdefault(fmt(c.get("type")), []).append(c)

    lines = [f"# DU Zone Categories — {len(categories)} total", ""]
    for doc_type, cats in by_type.items():
        lines.append(f"## {doc_type}")
        for c in cats:
            code = fmt(c.get("code"))
            if c.get("sous_code"):
                code = f"{code}/{c['sous_code']}"
            lines.append(f"- **{code}**: {fmt(c.get('libelong'))}")
        lines.append("")
    return render_lines(client, lines)


TOOLS = [
    ToolSpec(
        name="infoplu_list_document_models",
        title="List Document Models (CNIG Standards)",
        description="""List the CNIG national standards (modèles de documents) defining the data structure of each document type, versioned by year (e.g., PLU 2017, SUP 2016).

Use it to find a model name such as "cnig_PLU_2017" before calling infoplu_get_document_model.

Args:
  - type: "PLU", "PLUi", "CC", "POS", "SCoT", "SUP", "PSMV"
  - abstract: true = generic base models only, false = versioned models only
  - response_format: "markdown" (default) or "json"
""",
        input_model=ListDocumentModelsInput,
        handler=list_document_models,
    ),
    ToolSpec(
        name="infoplu_get_document_model",
        title="Get Document Model Details",
        description="""Get the full schema of one CNIG document model: every feature type (e.g., "zone_urba") with its attributes (name, type, description).

Helps interpret the properties returned by infoplu_get_du_at_location and infoplu_get_sup_at_location.

Args:
  - documentModel (required): "cnig_[TYPE]_[YEAR]", e.g., "cnig_PLU_2017", "cnig_PLUi_2019", "cnig_SUP_2016"
  - response_format: "markdown" (default) or "json"
""",
        input_model=DocumentModelInput,
        handler=get_document_model,
    ),
    ToolSpec(
        name="infoplu_list_sup_categories",
        title="List SUP Categories",
        description="""List the categories of Servitudes d'Utilité Publique (public utility easements), e.g., "AC1" heritage protection, "EL3" road reserve, "PM1" flood risk.

Each category has a code, a full and short French label, and a downloadable flag. Use it to decode codes returned by infoplu_get_sup_at_location.""",
        input_model=FormatOnlyInput,
        handler=list_sup_categories,
    ),
    ToolSpec(
        name="infoplu_list_du_categories",
        title="List DU Zone Categories",
        description="""List the land-use zone category codes used in Documents d'Urbanisme (PLU, POS, CC): U (urban), AU (to be urbanised), N (natural), A (agricultural) and their sub codes.

Use it to decode zone codes returned by infoplu_get_du_at_location.""",
        input_model=FormatOnlyInput,
        handler=list_du_categories,
    ),
]
