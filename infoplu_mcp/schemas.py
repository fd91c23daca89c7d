from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

ResponseFormat = Literal["markdown", "json"]

GridType = Literal["state", "region", "departement", "municipality", "epci", "scot"]
DocumentFamily = Literal["DU", "PSMV", "SUP", "SCoT"]
DocumentType = Literal["POS", "CC", "PLU", "PLUi", "PSMV", "SUP", "SCoT"]
LegalStatus = Literal["APPROVED", "PENDING", "REJECTED", "UNKNOWN"]
ProcedureDocumentType = Literal["PLU", "POS", "CC", "PLUi", "PSMV", "SCoT"]
ProcedureType = Literal["E", "R", "RA", "M", "MS", "MEC", "MAJ"]
StandardType = Literal["PLU", "POS", "CC", "PLUi", "SCoT", "SUP", "PSMV"]
DuTypeName = Literal[
    "document",
    "municipality",
    "info_lin",
    "info_pct",
    "info_surf",
    "prescription_lin",
    "prescription_pct",
    "prescription_surf",
    "secteur_cc",
    "zone_urba",
]
SupTypeName = Literal["assiette_sup_p", "assiette_sup_l", "assiette_sup_s"]

DOCUMENT_ID_PATTERN = r"^[a-f0-9]{32}$"
DATE_PATTERN = r"^[0-9]{8}$"
MODEL_NAME_PATTERN = r"^cnig_[A-Za-z0-9_]+_[0-9]{4}$"
# [dept]_[commune]_[prefix]_[section]_[number], e.g. 69_123_000_AB_0042 / 2A_004_000_0B_0012
PARCEL_ID_PATTERN = r"^[0-9A-Z]{2,3}_[0-9]{2,3}_[0-9]{3}_[0-9A-Z]{1,2}_[0-9]{4}$"


class ToolInput(BaseModel):
    """Common base: unknown keys are rejected, every tool can render markdown or json."""
    model_config = ConfigDict(extra="forbid")

    response_format: ResponseFormat = Field(
        "markdown", description='"markdown" (default) or "json"'
    )


# =========================
# TERRITORIES (GRIDS)
# =========================
class SearchGridsInput(ToolInput):
    name: Optional[str] = Field(
        None,
        description='Territory code: INSEE commune code (e.g., "69123"), dept code (e.g., "69"), '
        'region code (e.g., "84"), EPCI SIREN (e.g., "200046977"), or "scot_[SIREN]"',
    )
    title: Optional[str] = Field(
        None, description='Partial name match in French (e.g., "Lyon", "Métropole de Lyon", "Rhône")'
    )
    type: Optional[List[GridType]] = Field(
        None,
        description='Filter by territory type: "municipality" (commune), "epci" (intercommunal), '
        '"departement", "region", "scot", "state"',
    )
    rnu: Optional[bool] = Field(
        None, description="true = only territories under national default regulation (no PLU/CC in force)"
    )
    approved: Optional[bool] = Field(
        None, description="true = only SCoT territories with an approved document"
    )
    limit: int = Field(20, ge=1, le=100, description="Max results (default: 20, max: 100)")
    offset: int = Field(0, ge=0, description="Pagination offset (default: 0)")


class GridNameInput(ToolInput):
    gridName: str = Field(
        ...,
        min_length=1,
        description='Territory code: INSEE commune (e.g., "69123"), department (e.g., "69"), '
        'region (e.g., "84"), EPCI SIREN (e.g., "200046977")',
    )


# =========================
# DOCUMENTS
# =========================
class SearchDocumentsInput(ToolInput):
    documentFamily: Optional[List[DocumentFamily]] = Field(
        None,
        description='Filter by family: "DU" (PLU/PLUi/CC/POS), "PSMV", "SUP" (Servitudes d\'Utilité '
        'Publique), "SCoT"',
    )
    documentType: Optional[List[DocumentType]] = Field(
        None, description='Filter by type: "PLU", "PLUi", "CC", "POS", "PSMV", "SUP", "SCoT"'
    )
    partition: Optional[str] = Field(None, description='Exact partition code, e.g., "69123_PLU_20220101"')
    legalStatus: Optional[LegalStatus] = Field(
        None,
        description='"APPROVED" = legally in force, "PENDING" = under review, "REJECTED", "UNKNOWN"',
    )
    uploadedAfter: Optional[str] = Field(
        None,
        pattern=DATE_PATTERN,
        description='Only documents uploaded after this date, format "YYYYMMDD" (e.g., "20240101")',
    )
    page: int = Field(0, ge=0, description="Page number starting at 0 (default: 0)")
    limit: int = Field(20, ge=1, le=100, description="Results per page, max 100 (default: 20)")


class DocumentIdInput(ToolInput):
    documentId: str = Field(
        ...,
        min_length=32,
        max_length=32,
        pattern=DOCUMENT_ID_PATTERN,
        description="32-character lowercase hex document ID, obtainable from infoplu_search_documents",
    )


class DocumentFilesInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    documentId: str = Field(
        ...,
        min_length=32,
        max_length=32,
        pattern=DOCUMENT_ID_PATTERN,
        description="32-character lowercase hex document ID, obtainable from infoplu_search_documents",
    )


# =========================
# PROCEDURES
# =========================
class SearchProceduresInput(ToolInput):
    gridName: str = Field(
        ...,
        min_length=1,
        description='Territory code (e.g., "69123" for a commune, "200046977" for an EPCI). '
        "Use infoplu_search_grids to find it.",
    )
    documentType: Optional[ProcedureDocumentType] = Field(
        None, description='Filter by document type: "PLU", "PLUi", "CC", "POS", "PSMV", "SCoT"'
    )
    procedureType: Optional[ProcedureType] = Field(
        None,
        description='"E"=Élaboration, "R"=Révision, "RA"=Révision allégée, "M"=Modification, '
        '"MS"=Modification simplifiée, "MEC"=Mise en compatibilité, "MAJ"=Mise à jour',
    )
    approbedAfter: Optional[str] = Field(
        None,
        pattern=DATE_PATTERN,
        description='Only procedures approved after this date, format "YYYYMMDD"',
    )
    page: int = Field(1, ge=1, description="Page number starting at 1 (default: 1)")
    limit: int = Field(20, ge=1, le=100, description="Results per page (default: 20, max: 100)")


# =========================
# STANDARDS
# =========================
class ListDocumentModelsInput(ToolInput):
    type: Optional[StandardType] = Field(
        None, description='Filter by document type: "PLU", "PLUi", "CC", "POS", "SCoT", "SUP", "PSMV"'
    )
    abstract: Optional[bool] = Field(
        None, description="true = abstract/generic base models only; false = concrete versioned models only"
    )


class DocumentModelInput(ToolInput):
    documentModel: str = Field(
        ...,
        pattern=MODEL_NAME_PATTERN,
        description='Model name "cnig_[TYPE]_[YEAR]", e.g., "cnig_PLU_2017", "cnig_SUP_2016"',
    )


class FormatOnlyInput(ToolInput):
    pass


# =========================
# FEATURE INFO
# =========================
class PointInput(ToolInput):
    lon: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees, WGS84")
    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees, WGS84")
    partition: Optional[str] = Field(None, description="Restrict results to a specific document partition")


class DuAtLocationInput(PointInput):
    typeName: Optional[DuTypeName] = Field(
        None,
        description='"zone_urba" for the planning zone (most useful), "prescription_surf/lin/pct" for '
        'prescriptions, "document" for the governing document, "secteur_cc" for CC sectors, '
        '"info_surf/lin/pct" for informational layers',
    )


class SupAtLocationInput(PointInput):
    typeName: Optional[SupTypeName] = Field(
        None,
        description='"assiette_sup_s" surface servitudes (most common), "assiette_sup_l" linear, '
        '"assiette_sup_p" point',
    )


class ScotAtLocationInput(PointInput):
    pass


class ParcelInput(ToolInput):
    parcelId: str = Field(
        ...,
        pattern=PARCEL_ID_PATTERN,
        description='Cadastral parcel ID, e.g., "69_123_000_AB_0042". '
        "Format: [dept]_[commune]_[prefix]_[section]_[number]",
    )
