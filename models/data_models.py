# models/data_models.py
"""
Modèles Pydantic des requêtes/réponses API.

Champs en snake_case côté Python, camelCase sur le fil (alias).
La validation des corps de requête se fait ici, avant tout appel au
calculateur ou au workflow.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.config import settings
from services.quote_calculator import DiscountMode, QuoteTotals
from services.quote_workflow_engine import Quote, QuoteRevision, QuoteStatus


# Bornes de saisie : une ligne reste dans la précision des colonnes montant
MAX_QUANTITY = 10_000
MAX_RATE = 10_000_000


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# === Calcul (aperçu) ===

class LineItemIn(CamelModel):
    """Ligne pour l'aperçu des totaux"""
    quantity: float = Field(..., gt=0, le=MAX_QUANTITY, description="Quantité")
    rate: float = Field(..., ge=0, le=MAX_RATE, description="Prix unitaire")
    discount: float = Field(default=0.0, ge=0, le=100, description="Remise ligne en %")
    category_id: Optional[str] = None
    category_name: Optional[str] = None


class CalculateRequest(CamelModel):
    items: List[LineItemIn] = Field(default_factory=list)
    discount_mode: DiscountMode = DiscountMode.LINE_ITEM
    overall_discount: float = Field(default=0.0, ge=0, le=100)
    tax_rate: float = Field(default=settings.default_tax_rate, ge=0, le=100)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "items": [
                    {"quantity": 2, "rate": 100, "discount": 0, "categoryId": "A", "categoryName": "Furniture"},
                    {"quantity": 1, "rate": 50, "discount": 10, "categoryId": "B", "categoryName": "Lighting"},
                ],
                "discountMode": "OVERALL",
                "overallDiscount": 10,
                "taxRate": 18,
            }
        },
    )


class CategoryContributionOut(CamelModel):
    category_name: str
    total: float


class QuoteTotalsOut(CamelModel):
    subtotal: float
    discount_amount: float
    taxable_amount: float
    tax: float
    grand_total: float
    line_totals: List[float] = Field(default_factory=list)
    category_contributions: List[CategoryContributionOut] = Field(default_factory=list)

    @classmethod
    def from_totals(cls, totals: QuoteTotals) -> "QuoteTotalsOut":
        return cls(
            subtotal=float(totals.subtotal),
            discount_amount=float(totals.discount_amount),
            taxable_amount=float(totals.taxable_amount),
            tax=float(totals.tax),
            grand_total=float(totals.grand_total),
            line_totals=[float(t) for t in totals.line_totals],
            category_contributions=[
                CategoryContributionOut(category_name=c.category_name, total=float(c.total))
                for c in totals.category_contributions
            ],
        )


# === Devis ===

class QuoteItemIn(CamelModel):
    product_id: str
    description: Optional[str] = None
    quantity: float = Field(..., gt=0, le=MAX_QUANTITY)
    rate: float = Field(..., ge=0, le=MAX_RATE)
    discount: float = Field(default=0.0, ge=0, le=100)
    order: int = 0
    dimensions: Optional[Dict[str, Any]] = None


class QuoteCreate(CamelModel):
    title: str = Field(..., min_length=1)
    client_id: Optional[str] = None
    discount_mode: DiscountMode = DiscountMode.LINE_ITEM
    overall_discount: float = Field(default=0.0, ge=0, le=100)
    tax_rate: float = Field(default=settings.default_tax_rate, ge=0, le=100)
    items: List[QuoteItemIn] = Field(default_factory=list)


class QuoteUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    client_id: Optional[str] = None
    discount_mode: Optional[DiscountMode] = None
    overall_discount: Optional[float] = Field(default=None, ge=0, le=100)
    tax_rate: Optional[float] = Field(default=None, ge=0, le=100)
    items: Optional[List[QuoteItemIn]] = None


class QuoteItemOut(CamelModel):
    id: str
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    category_name: Optional[str] = None
    unit: Optional[str] = None
    description: Optional[str] = None
    quantity: float
    rate: float
    discount: float
    line_total: float
    order: int = 0
    dimensions: Optional[Dict[str, Any]] = None


class QuoteOut(CamelModel):
    id: str
    quote_number: str
    title: str
    client_id: Optional[str] = None
    discount_mode: DiscountMode
    overall_discount: float
    tax_rate: float
    subtotal: float
    discount: float
    tax: float
    grand_total: float
    status: QuoteStatus
    version: int = 1
    is_approved: bool = False
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    approval_notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[QuoteItemOut] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, quote: Quote, items: Optional[List[Dict[str, Any]]] = None) -> "QuoteOut":
        return cls(
            id=quote.id,
            quote_number=quote.quote_number,
            title=quote.title,
            client_id=quote.client_id,
            discount_mode=quote.discount_mode,
            overall_discount=float(quote.overall_discount),
            tax_rate=float(quote.tax_rate),
            subtotal=float(quote.subtotal),
            discount=float(quote.discount),
            tax=float(quote.tax),
            grand_total=float(quote.grand_total),
            status=quote.status,
            version=quote.version or 1,
            is_approved=quote.is_approved,
            approved_by=quote.approved_by,
            approved_at=quote.approved_at,
            approval_notes=quote.approval_notes,
            created_by=quote.created_by,
            created_at=quote.created_at,
            updated_at=quote.updated_at,
            items=[QuoteItemOut(**item) for item in (items or [])],
        )


class RevisionOut(CamelModel):
    id: Optional[str] = None
    quote_id: str
    version: int
    status: QuoteStatus
    exported_by: Optional[str] = None
    exported_at: datetime
    changes: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_domain(cls, revision: QuoteRevision) -> "RevisionOut":
        return cls(
            id=revision.id,
            quote_id=revision.quote_id,
            version=revision.version,
            status=revision.status,
            exported_by=revision.exported_by,
            exported_at=revision.exported_at,
            changes=revision.changes,
            notes=revision.notes,
        )


class TransitionRequest(CamelModel):
    notes: Optional[str] = None


class ApprovalRequest(CamelModel):
    """Corps de /approve : { action: 'approve' | 'reject', notes?: string }"""
    action: Literal["approve", "reject"]
    notes: Optional[str] = None


class TransitionResponse(CamelModel):
    success: bool = True
    message: str
    quote: QuoteOut
    revision: RevisionOut


# === Catalogue ===

class CategoryIn(CamelModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    parent_id: Optional[str] = None
    is_active: bool = True


class CategoryOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductIn(CamelModel):
    name: str = Field(..., min_length=1)
    item_code: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    base_rate: float = Field(default=0.0, ge=0)
    unit: str = "pcs"
    image_url: Optional[str] = None
    is_active: bool = True


class ProductOut(CamelModel):
    id: str
    name: str
    item_code: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    base_rate: float = 0.0
    unit: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UnitConversionOut(CamelModel):
    value: float
    from_unit: str
    to_unit: str
    factor: float
    result: float
    category: str


# === Clients ===

class ClientIn(CamelModel):
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    is_active: bool = True


class ClientOut(CamelModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# === Modèles PDF et conditions générales ===

HEX_COLOR = r"^#[0-9a-fA-F]{6}$"


class TemplateIn(CamelModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    company_name: Optional[str] = None
    accent_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    header_bg: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    footer_text: Optional[str] = None
    currency_symbol: Optional[str] = Field(default=None, max_length=10)
    is_default: bool = False


class TemplateOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    company_name: Optional[str] = None
    accent_color: Optional[str] = None
    header_bg: Optional[str] = None
    footer_text: Optional[str] = None
    currency_symbol: Optional[str] = None
    is_default: bool = False
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TermsIn(CamelModel):
    content: str = Field(..., min_length=1)


class TermsOut(CamelModel):
    content: str


# === Mapping colonnes stockées (minuscules aplaties) <-> champs API ===

CATEGORY_COLUMNS = {
    "name": "name",
    "description": "description",
    "parent_id": "parentid",
    "is_active": "isactive",
}

PRODUCT_COLUMNS = {
    "name": "name",
    "item_code": "itemcode",
    "description": "description",
    "category_id": "categoryid",
    "base_rate": "baserate",
    "unit": "unit",
    "image_url": "imageurl",
    "is_active": "isactive",
}

CLIENT_COLUMNS = {
    "name": "name",
    "email": "email",
    "phone": "phone",
    "company": "company",
    "address": "address",
    "is_active": "isactive",
}

TEMPLATE_COLUMNS = {
    "name": "name",
    "description": "description",
    "company_name": "companyname",
    "accent_color": "accentcolor",
    "header_bg": "headerbg",
    "footer_text": "footertext",
    "currency_symbol": "currencysymbol",
    "is_default": "isdefault",
    "created_by": "createdby",
}

TIMESTAMP_COLUMNS = {"created_at": "createdat", "updated_at": "updatedat"}


def to_record(model: BaseModel, columns: Dict[str, str], exclude_unset: bool = False) -> Dict[str, Any]:
    """Champs API -> colonnes stockées."""
    data = model.model_dump(exclude_unset=exclude_unset)
    return {columns[name]: value for name, value in data.items() if name in columns}


def from_record(row: Dict[str, Any], columns: Dict[str, str]) -> Dict[str, Any]:
    """Colonnes stockées -> champs API (id et horodatages inclus)."""
    mapping = {"id": "id", **columns, **TIMESTAMP_COLUMNS}
    return {name: row.get(column) for name, column in mapping.items() if column in row}
