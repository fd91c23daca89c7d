"""
Spatial lookups (feature-info endpoints).

Every response is a GeoJSON FeatureCollection; geometry is dropped by
prune_feature_collection() before anything is rendered.
"""
import json
from typing import Any, Dict, Optional

from ..client import InfoPluClient, path_segment
from ..pruning import prune_feature_collection
from ..schemas import DuAtLocationInput, ParcelInput, PointInput, ScotAtLocationInput, SupAtLocationInput
from .base import ToolSpec, render_json, render_lines

NO_FEATURES = "No features found at this location."


def format_collection_markdown(collection: Dict[str, Any], title: str) -> list:
    lines = [f"# {title}", ""]

    features = collection["features"]
    if not features:
        lines.append(NO_FEATURES)
        return lines

    lines.extend([f"{collection['totalFeatures']} feature(s) found:", ""])
    for i, f in enumerate(features, start=1):
        header = f"Feature {i} (id: {f['id']})" if f.get("id") else f"Feature {i}"
        lines.append(f"## {header}")
        for key, val in f["properties"].items():
            if val is None or val == "":
                continue
            display = json.dumps(val, ensure_ascii=False) if isinstance(val, (dict, list)) else _scalar(val)
            lines.append(f"- **{key}**: {display}")
        lines.append("")
    return lines


def _scalar(val: Any) -> str:
    if isinstance(val, bool):
        return "true" if val else "false"
    return str(val)


def _coord(v: float) -> str:
    # 2.0 -> "2", as the upstream echoes coordinates
    return str(int(v)) if float(v).is_integer() else repr(v)


def _point_query(p: PointInput, type_name: Optional[str] = None) -> Dict[str, Any]:
    query: Dict[str, Any] = {"lon": p.lon, "lat": p.lat}
    if type_name:
        query["typeName"] = type_name
    if p.partition:
        query["partition"] = p.partition
    return query


async def _lookup(client: InfoPluClient, path: str, query: Optional[Dict[str, Any]], response_format: str, title: str) -> str:
    collection = prune_feature_collection(await client.get(path, query))
    if response_format == "json":
        return render_json(client, collection)
    return render_lines(client, format_collection_markdown(collection, title))


async def get_du_at_location(client: InfoPluClient, p: DuAtLocationInput) -> str:
    title = f"DU Features at (lon={_coord(p.lon)}, lat={_coord(p.lat)})"
    if p.typeName:
        title += f" — type: {p.typeName}"
    return await _lookup(client, "/feature-info/du", _point_query(p, p.typeName), p.response_format, title)


async def get_sup_at_location(client: InfoPluClient, p: SupAtLocationInput) -> str:
    title = f"SUP Servitudes at (lon={_coord(p.lon)}, lat={_coord(p.lat)})"
    return await _lookup(client, "/feature-info/sup", _point_query(p, p.typeName), p.response_format, title)


async def get_scot_at_location(client: InfoPluClient, p: ScotAtLocationInput) -> str:
    title = f"SCoT at (lon={_coord(p.lon)}, lat={_coord(p.lat)})"
    return await _lookup(client, "/feature-info/scot", _point_query(p), p.response_format, title)


async def get_features_by_parcel(client: InfoPluClient, p: ParcelInput) -> str:
    title = f"Urban Planning Features for Parcel {p.parcelId}"
    path = f"/feature-info/parcel/{path_segment(p.parcelId)}"
    return await _lookup(client, path, None, p.response_format, title)


TOOLS = [
    ToolSpec(
        name="infoplu_get_du_at_location",
        title="Get Urban Planning Features at Location",
        description="""Get the urban planning (DU) features at a WGS84 point: zoning, prescriptions and informational overlays of the governing PLU/PLUi/CC/POS.

The core lookup for "what planning rules apply here?". Geometry is stripped, only properties are returned.

Args:
  - lon, lat (required): decimal degrees, WGS84 (e.g., lon=2.3488, lat=48.8534 for central Paris)
  - typeName: "zone_urba" (most common), "document", "prescription_surf", "prescription_lin", "prescription_pct", "info_surf", "info_lin", "info_pct", "secteur_cc", "municipality"
  - partition: restrict to one document partition
  - response_format: "markdown" (default) or "json"

Zone properties include libelle (zone code), libelong, typezone, destdomi, partition.""",
        input_model=DuAtLocationInput,
        handler=get_du_at_location,
    ),
    ToolSpec(
        name="infoplu_get_sup_at_location",
        title="Get SUP Servitudes at Location",
        description="""Get the SUP (Servitudes d'Utilité Publique) features at a WGS84 point: heritage protection (AC1, AC2), natural risks (PM1, PM3), utility corridors (I3, I4), transport reserves (EL, T), airport zones (PT)...

Use it alongside infoplu_get_du_at_location for the full set of constraints. Geometry is stripped.

Args:
  - lon, lat (required): decimal degrees, WGS84
  - typeName: "assiette_sup_s" (surface, most common), "assiette_sup_l" (linear), "assiette_sup_p" (point)
  - partition: restrict to one SUP partition
  - response_format: "markdown" (default) or "json"
""",
        input_model=SupAtLocationInput,
        handler=get_sup_at_location,
    ),
    ToolSpec(
        name="infoplu_get_scot_at_location",
        title="Get SCoT at Location",
        description="""Get the SCoT (Schéma de Cohérence Territoriale) covering a WGS84 point.

Then use infoplu_search_documents with documentFamily=["SCoT"] to find the associated document. Geometry is stripped.

Args:
  - lon, lat (required): decimal degrees, WGS84
  - partition: restrict to one SCoT partition
  - response_format: "markdown" (default) or "json"
""",
        input_model=ScotAtLocationInput,
        handler=get_scot_at_location,
    ),
    ToolSpec(
        name="infoplu_get_features_by_parcel",
        title="Get Urban Planning Features by Parcel ID",
        description="""Get every urban planning feature (zones, prescriptions, servitudes, documents) intersecting one cadastral parcel.

Args:
  - parcelId (required): [dept]_[commune]_[prefix]_[section]_[number], e.g., "69_123_000_AB_0042"
  - response_format: "markdown" (default) or "json"

Returns "Error: Resource not found" for an unknown parcel. Geometry is stripped.""",
        input_model=ParcelInput,
        handler=get_features_by_parcel,
    ),
]
