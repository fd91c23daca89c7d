import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Type

import mcp.types as types
from pydantic import BaseModel

from ..client import InfoPluClient
from ..errors import handle_api_error
from ..utils import logger, truncate_text

Handler = Callable[[InfoPluClient, Any], Awaitable[str]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    title: str
    description: str
    input_model: Type[BaseModel]
    handler: Handler

    def to_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=self.input_model.model_json_schema(),
            annotations=types.ToolAnnotations(
                title=self.title,
                readOnlyHint=True,
                destructiveHint=False,
                idempotentHint=True,
                openWorldHint=True,
            ),
        )


async def invoke(tool: ToolSpec, client: InfoPluClient, arguments: Dict[str, Any]) -> str:
    """
    Validate then run one tool.
    - pydantic.ValidationError propagates (the call itself fails, nothing is sent upstream)
    - anything raised by the handler becomes an "Error: ..." text result
    - every result, including empty-result hints and errors, is capped to character_limit
    """
    params = tool.input_model.model_validate(arguments or {})
    try:
        text = await tool.handler(client, params)
    except Exception as e:
        logger.warning("tool_failed", extra={"tool": tool.name, "error": repr(e)})
        text = handle_api_error(e)
    return capped(client, text)


# ---------- rendering helpers ----------
def capped(client: InfoPluClient, text: str) -> str:
    return truncate_text(text, client.s.character_limit)


def render_json(client: InfoPluClient, data: Any) -> str:
    return capped(client, json.dumps(data, indent=2, ensure_ascii=False))


def render_lines(client: InfoPluClient, lines: List[str]) -> str:
    return capped(client, "\n".join(lines))


def fmt(value: Any) -> str:
    """Display a scalar the way the upstream JSON spells it."""
    if value is None:
        return "n/a"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
