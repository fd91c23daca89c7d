from dotenv import load_dotenv
load_dotenv()

import os
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError

DEFAULT_BASE_URL = "https://www.geoportail-urbanisme.gouv.fr/api"


class Settings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # Géoportail de l'Urbanisme REST endpoint (no API key needed)
    base_url: HttpUrl = Field(
        default=DEFAULT_BASE_URL, alias="INFOPLU_API_BASE_URL", validate_default=True
    )

    # HTTP
    timeout_s: float = Field(default=30.0, gt=0, alias="INFOPLU_TIMEOUT_S")

    # output cap for rendered tool results (characters)
    character_limit: int = Field(default=25000, ge=1, alias="INFOPLU_CHARACTER_LIMIT")

    # inbound transport
    transport: Literal["stdio", "sse"] = Field(default="stdio", alias="TRANSPORT")
    host: str = Field(default="0.0.0.0", alias="INFOPLU_HOST")
    port: int = Field(default=3000, ge=1, le=65535, alias="PORT")

    @property
    def api_root(self) -> str:
        return str(self.base_url).rstrip("/")


def load_settings() -> Settings:
    keys = (
        "INFOPLU_API_BASE_URL",
        "INFOPLU_TIMEOUT_S",
        "INFOPLU_CHARACTER_LIMIT",
        "TRANSPORT",
        "INFOPLU_HOST",
        "PORT",
    )
    # unset or empty variables fall back to the model defaults
    env = {k: os.environ[k] for k in keys if os.environ.get(k)}
    try:
        return Settings.model_validate(env)
    except ValidationError as e:
        raise RuntimeError(
            "Config error: check INFOPLU_API_BASE_URL, INFOPLU_TIMEOUT_S, "
            "INFOPLU_CHARACTER_LIMIT, TRANSPORT and PORT."
        ) from e
