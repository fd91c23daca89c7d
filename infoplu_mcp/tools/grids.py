"""Territory (grid) tools: search, lookup by code, parents, children."""
from typing import Any, Dict, List

from ..client import InfoPluClient, path_segment
from ..pruning import prune_grid
from ..schemas import GridNameInput, SearchGridsInput
from .base import ToolSpec, fmt, render_json, render_lines

GRID_FIELDS = ["name", "title", "type", "rnu", "approved", "coastline"]


def grid_to_markdown(g: Dict[str, Any]) -> List[str]:
    lines = [f"- **Type**: {fmt(g.get('type'))}"]
    if g.get("rnu") is True:
        lines.append("- **RNU**: Yes, no approved urban planning document (national default rules apply)")
    if g.get("coastline") is True:
        lines.append("- **Coastal territory**: Yes")
    if g.get("approved") is not None:
        lines.append(f"- **Approved SCoT**: {'Yes' if g['approved'] else 'No'}")
    return lines


def grid_to_bullet(g: Dict[str, Any], rnu_flag: str) -> str:
    rnu = f" | {rnu_flag}" if g.get("rnu") else ""
    return f"- **{fmt(g.get('title'))}** (`{fmt(g.get('name'))}`) — {fmt(g.get('type'))}{rnu}"


async def search_grids(client: InfoPluClient, p: SearchGridsInput) -> str:
    query: Dict[str, Any] = {
        "_limit": p.limit,
        "_offset": p.offset,
        "_fields": GRID_FIELDS,
    }
    if p.name:
        query["name"] = p.name
    if p.title:
        query["title"] = p.title
    if p.type:
        query["type"] = list(p.type)
    if p.rnu is not None:
        query["rnu"] = p.rnu
    if p.approved is not None:
        query["approved"] = p.approved

    grids = [prune_grid(g) for g in await client.get("/grid/", query)]

    if not grids:
        return (
            'No territories found. Try using the INSEE code (e.g., "69123" for Lyon 3e), '
            'or search by title (e.g., "Lyon").'
        )

    if p.response_format == "json":
        return render_json(client, {"count": len(grids), "grids": grids})

    lines = [f"# Administrative Territories — {len(grids)} result(s)", ""]
    for g in grids:
        lines.append(f"## {fmt(g.get('title'))} ({fmt(g.get('name'))})")
        lines.extend(grid_to_markdown(g))
        lines.append("")
    return render_lines(client, lines)


async def get_grid(client: InfoPluClient, p: GridNameInput) -> str:
    raw = await client.get(f"/grid/{path_segment(p.gridName)}", {"_fields": GRID_FIELDS})
    g = prune_grid(raw)

    if p.response_format == "json":
        return render_json(client, g)

    lines = [f"# {fmt(g.get('title'))} ({fmt(g.get('name'))})", ""]
    lines.extend(grid_to_markdown(g))
    return render_lines(client, lines)


async def get_grid_parents(client: InfoPluClient, p: GridNameInput) -> str:
    parents = [prune_grid(g) for g in await client.get(f"/grid/{path_segment(p.gridName)}/parents")]

    if not parents:
        return (
            f'No parent territories found for "{p.gridName}". '
            "This territory may be at the top of the administrative hierarchy."
        )

    if p.response_format == "json":
        return render_json(client, parents)

    lines = [f"# Parent Territories of {p.gridName}", ""]
    lines.extend(grid_to_bullet(g, "RNU") for g in parents)
    return render_lines(client, lines)


async def get_grid_children(client: InfoPluClient, p: GridNameInput) -> str:
    children = [prune_grid(g) for g in await client.get(f"/grid/{path_segment(p.gridName)}/children")]

    if not children:
        return f'No child territories found for "{p.gridName}".'

    if p.response_format == "json":
        return render_json(client, {"count": len(children), "children": children})

    lines = [f"# Child Territories of {p.gridName} — {len(children)} result(s)", ""]
    lines.extend(grid_to_bullet(g, "⚠ RNU") for g in children)
    return render_lines(client, lines)


TOOLS = [
    ToolSpec(
        name="infoplu_search_grids",
        title="Search Administrative Territories",
        description="""Search French administrative territories (communes, EPCIs, departments, regions, SCoT perimeters) in the Géoportail de l'Urbanisme.

The "grid name" returned here is the territory code used across the platform: it is the key for documents (via partition), procedures and the administrative hierarchy.

Use it to:
  - find a municipality's grid name from its INSEE code or French name
  - find territories still under the national default regulation (RNU, no PLU/CC in force)
  - check whether a SCoT territory has an approved document

Args:
  - name: territory code (INSEE "69123", department "69", region "84", EPCI SIREN "200046977", "scot_[SIREN]")
  - title: partial French name (e.g., "Lyon")
  - type: any of "municipality", "epci", "departement", "region", "scot", "state"
  - rnu / approved: boolean filters
  - limit (1-100, default 20), offset (default 0)
  - response_format: "markdown" (default) or "json"

If nothing matches, try the 5-digit INSEE code or search by title.""",
        input_model=SearchGridsInput,
        handler=search_grids,
    ),
    ToolSpec(
        name="infoplu_get_grid",
        title="Get Territory Details",
        description="""Get one administrative territory by its grid name (territory code): name, title, type, rnu, coastline, approved.

Returns "Error: Resource not found" for unknown codes; use infoplu_search_grids to discover valid ones.""",
        input_model=GridNameInput,
        handler=get_grid,
    ),
    ToolSpec(
        name="infoplu_get_grid_parents",
        title="Get Parent Territories",
        description="""Get the parent territories of a territory, going up the French administrative hierarchy.

For a commune the parents are usually its EPCI, department, region and the state. Useful to know which higher-level planning documents (SCoT, regional plans) govern a territory.""",
        input_model=GridNameInput,
        handler=get_grid_parents,
    ),
    ToolSpec(
        name="infoplu_get_grid_children",
        title="Get Child Territories",
        description="""Get the child territories of a territory.

For a department the children are its communes and EPCIs; for an EPCI, its member communes.""",
        input_model=GridNameInput,
        handler=get_grid_children,
    ),
]
