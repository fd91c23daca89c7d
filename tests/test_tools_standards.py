"""Tests for standards tools."""

import json

import pytest
from pydantic import ValidationError

from infoplu_mcp.tools import REGISTRY, invoke

pytestmark = pytest.mark.anyio

MODEL = {
    "id": "m1",
    "name": "cnig_PLU_2017",
    "title": "PLU 2017",
    "description": "Standard CNIG PLU v2017",
    "abstract": False,
    "type": "PLU",
    "parent": "cnig_PLU",
    "featureTypes": [
        {
            "name": "zone_urba",
            "title": "Zone urbaine",
            "description": "Zonage du document",
            "attributes": [
                {"name": "libelle", "title": "Libellé", "type": "String", "description": "Code de la zone"},
                {"name": "typezone", "title": "Type de zone", "type": "String"},
            ],
        },
        {"name": "doc_urba", "title": "Document", "attributes": []},
    ],
}


class TestDocumentModels:
    """Tests for infoplu_list_document_models / infoplu_get_document_model."""

    async def test_list_query_and_markdown(self, client) -> None:
        summary = {k: v for k, v in MODEL.items() if k != "featureTypes"}
        client.get.return_value = [summary, dict(summary, name="cnig_PLU", abstract=True, parent=None)]

        text = await invoke(REGISTRY["infoplu_list_document_models"], client, {"type": "PLU", "abstract": False})

        client.get.assert_awaited_once_with("/standard", {"type": "PLU", "abstract": False})
        assert text.splitlines()[0] == "# CNIG Document Models — 2 result(s)"
        assert "## `cnig_PLU_2017`" in text
        assert "- **Abstract**: No (versioned)" in text
        assert "- **Abstract**: Yes (generic base)" in text
        assert "- **Parent**: cnig_PLU" in text

    async def test_list_without_filters(self, client) -> None:
        client.get.return_value = []

        text = await invoke(REGISTRY["infoplu_list_document_models"], client, {})

        client.get.assert_awaited_once_with("/standard", {})
        assert text.startswith("No document models found.")

    async def test_get_model_attribute_table(self, client) -> None:
        client.get.return_value = MODEL

        text = await invoke(REGISTRY["infoplu_get_document_model"], client, {"documentModel": "cnig_PLU_2017"})

        client.get.assert_awaited_once_with("/standard/cnig_PLU_2017")
        lines = text.splitlines()
        assert lines[0] == "# cnig_PLU_2017 — PLU 2017"
        assert "- **Parent model**: cnig_PLU" in lines
        assert "## Feature Types (2)" in lines
        assert "### `zone_urba` — Zone urbaine" in lines
        assert "_Zonage du document_" in lines
        assert "| Attribute | Type | Description |" in lines
        assert "| `libelle` | String | Code de la zone |" in lines
        # title used when the description is missing
        assert "| `typezone` | String | Type de zone |" in lines
        assert lines.count("| Attribute | Type | Description |") == 1

    async def test_get_model_json(self, client) -> None:
        client.get.return_value = MODEL

        text = await invoke(
            REGISTRY["infoplu_get_document_model"], client, {"documentModel": "cnig_SUP_2016", "response_format": "json"}
        )

        assert json.loads(text) == MODEL

    @pytest.mark.parametrize(
        "name",
        ["PLU_2017", "cnig_PLU_17", "cnig__2017x", "cnig_PLU_2017/../x", "cnig_PLÜ_2017", "cnig_PLU_２０１７"],
    )
    async def test_bad_model_name_rejected(self, client, name) -> None:
        with pytest.raises(ValidationError):
            await invoke(REGISTRY["infoplu_get_document_model"], client, {"documentModel": name})
        client.get.assert_not_awaited()


class TestCategories:
    """Tests for SUP / DU category tools."""

    async def test_sup_categories(self, client) -> None:
        client.get.return_value = [
            {"name": "AC1", "libelle": "Monuments historiques", "libelleCourt": "MH", "downloadable": True},
            {"name": "PM1", "libelle": "Plans de prévention des risques", "libelleCourt": "PPR", "downloadable": False},
        ]

        text = await invoke(REGISTRY["infoplu_list_sup_categories"], client, {})

        client.get.assert_awaited_once_with("/standard/sup-categories")
        lines = text.splitlines()
        assert lines[0] == "# SUP Categories — 2 total"
        assert "- **AC1** — Monuments historiques *(MH)* `[downloadable]`" in lines
        assert "- **PM1** — Plans de prévention des risques *(PPR)*" in lines

    async def test_du_categories_grouped(self, client) -> None:
        client.get.return_value = [
            {"type": "PLU", "code": "U", "libelong": "Zone urbaine"},
            {"type": "CC", "code": "01", "libelong": "Secteur constructible"},
            {"type": "PLU", "code": "AU", "sous_code": "AUc", "libelong": "Zone à urbaniser constructible"},
        ]

        text = await invoke(REGISTRY["infoplu_list_du_categories"], client, {})

        client.get.assert_awaited_once_with("/standard/du-categories")
        assert text.splitlines()[0] == "# DU Zone Categories — 3 total"
        plu = text.index("## PLU")
        cc = text.index("## CC")
        assert plu < text.index("- **U**: Zone urbaine") < text.index("- **AU/AUc**") < cc
        assert text.index("- **01**: Secteur constructible") > cc

    async def test_du_categories_json(self, client) -> None:
        cats = [{"type": "PLU", "code": "U", "libelong": "Zone urbaine"}]
        client.get.return_value = cats

        text = await invoke(REGISTRY["infoplu_list_du_categories"], client, {"response_format": "json"})

        assert json.loads(text) == cats
