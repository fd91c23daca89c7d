"""
Strip geometry and bounding boxes from upstream objects.

Only the keys known to be large and useless to an agent are removed; every
other key is passed through untouched. Inputs are never mutated.
"""
from typing import Any, Dict, List


def prune_grid(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in raw.items() if k != "geometry"}


def prune_document(raw: Dict[str, Any]) -> Dict[str, Any]:
    doc = {k: v for k, v in raw.items() if k != "bbox"}
    grid = doc.get("grid")
    if isinstance(grid, dict):
        doc["grid"] = prune_grid(grid)
    return doc


def prune_feature(raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raw = {}
    feature: Dict[str, Any] = {}
    if raw.get("id") is not None:
        feature["id"] = str(raw["id"])
    feature["type"] = "Feature"
    props = raw.get("properties")
    feature["properties"] = dict(props) if isinstance(props, dict) else {}
    return feature


def prune_feature_collection(raw: Any) -> Dict[str, Any]:
    """
    GeoJSON FeatureCollection -> {type, totalFeatures, features[id?, type, properties]}.
    totalFeatures is recomputed from the kept features, not copied from upstream.
    """
    raw_features = raw.get("features") if isinstance(raw, dict) else None
    if not isinstance(raw_features, list):
        raw_features = []

    features: List[Dict[str, Any]] = [prune_feature(f) for f in raw_features]
    return {
        "type": "FeatureCollection",
        "totalFeatures": len(features),
        "features": features,
    }
