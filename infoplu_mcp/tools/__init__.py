from typing import Dict

from . import documents, feature_info, grids, procedures, standards
from .base import ToolSpec, invoke

ALL_TOOLS = [
    *documents.TOOLS,
    *grids.TOOLS,
    *procedures.TOOLS,
    *standards.TOOLS,
    *feature_info.TOOLS,
]

REGISTRY: Dict[str, ToolSpec] = {t.name: t for t in ALL_TOOLS}

__all__ = ["ALL_TOOLS", "REGISTRY", "ToolSpec", "invoke"]
