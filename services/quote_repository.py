"""
Repository des devis au-dessus du client données.

Tables:
- quotes          : agrégat devis (totaux figés, statut, version)
- quote_items     : lignes (modifiables uniquement en DRAFT)
- quote_revisions : journal append-only des transitions

Responsabilités:
- Mapper colonnes stockées (minuscules aplaties) <-> objets métier
- Valoriser les lignes avec la catégorie de leur produit
- Refuser toute modification d'un devis sorti de DRAFT
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from db.data_client import DataClient, RecordNotFound
from services.quote_calculator import (
    DiscountMode,
    LineItem,
    QuoteTotals,
    compute_totals,
    generate_quote_number,
    to_decimal,
)
from services.quote_workflow_engine import (
    Quote,
    QuoteNotEditable,
    QuoteRevision,
    QuoteStatus,
)

logger = logging.getLogger(__name__)

MAX_NUMBER_ATTEMPTS = 5


def row_to_quote(row: Dict[str, Any]) -> Quote:
    return Quote(
        id=row["id"],
        quote_number=row["quotenumber"],
        title=row["title"],
        status=QuoteStatus(row["status"]),
        version=row.get("version"),
        client_id=row.get("clientid"),
        discount_mode=DiscountMode(row.get("discountmode") or DiscountMode.LINE_ITEM),
        overall_discount=to_decimal(row.get("overalldiscount")),
        tax_rate=to_decimal(row.get("taxrate")),
        subtotal=to_decimal(row.get("subtotal")),
        discount=to_decimal(row.get("discount")),
        tax=to_decimal(row.get("tax")),
        grand_total=to_decimal(row.get("grandtotal")),
        is_approved=bool(row.get("isapproved")),
        approved_by=row.get("approvedby"),
        approved_at=row.get("approvedat"),
        approval_notes=row.get("approvalnotes"),
        created_by=row.get("createdby"),
        created_at=row.get("createdat"),
        updated_at=row.get("updatedat"),
    )


def row_to_revision(row: Dict[str, Any]) -> QuoteRevision:
    return QuoteRevision(
        id=row["id"],
        quote_id=row["quoteid"],
        version=row["version"],
        status=QuoteStatus(row["status"]),
        exported_by=row.get("exported_by"),
        exported_at=row["exported_at"],
        changes=row.get("changes"),
        notes=row.get("notes"),
    )


def _totals_columns(totals: QuoteTotals) -> Dict[str, Any]:
    return {
        "subtotal": totals.subtotal,
        "discount": totals.discount_amount,
        "tax": totals.tax,
        "grandtotal": totals.grand_total,
    }


class QuoteRepository:
    """
    Accès devis / lignes / révisions.

    AUCUNE règle de transition ici - le workflow décide, le repository persiste.
    """

    def __init__(self, client: DataClient):
        self.client = client

    # === Lignes ===

    def _product_categories(self, product_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """productid -> {name, unit, categoryid, categoryname}"""
        product_ids = [pid for pid in set(product_ids) if pid]
        if not product_ids:
            return {}

        products = self.client.find("products", {"id": product_ids})
        category_ids = [p["categoryid"] for p in products if p.get("categoryid")]
        categories = {}
        if category_ids:
            rows = self.client.find("categories", {"id": category_ids})
            categories = {c["id"]: c["name"] for c in rows}

        return {
            p["id"]: {
                "name": p["name"],
                "unit": p.get("unit"),
                "categoryid": p.get("categoryid"),
                "categoryname": categories.get(p.get("categoryid")),
            }
            for p in products
        }

    def _price_items(self, items: List[Dict[str, Any]]) -> List[LineItem]:
        lookup = self._product_categories([i.get("productid") for i in items])
        line_items = []
        for item in items:
            product = lookup.get(item.get("productid"), {})
            line_items.append(LineItem(
                quantity=item.get("quantity"),
                rate=item.get("rate"),
                discount_percent=item.get("discount"),
                category_id=product.get("categoryid"),
                category_name=product.get("categoryname"),
            ))
        return line_items

    def _replace_items(self, quote_id: str, items: List[Dict[str, Any]], totals: QuoteTotals) -> None:
        existing = self.client.find("quote_items", {"quoteid": quote_id})
        if existing:
            self.client.delete("quote_items", {"quoteid": quote_id})

        for position, (item, line_total) in enumerate(zip(items, totals.line_totals)):
            self.client.insert("quote_items", {
                "quoteid": quote_id,
                "productid": item.get("productid"),
                "description": item.get("description"),
                "quantity": to_decimal(item.get("quantity")),
                "rate": to_decimal(item.get("rate")),
                "discount": to_decimal(item.get("discount")),
                "linetotal": line_total,
                "order": item.get("order", position),
                "dimensions": item.get("dimensions"),
            })

    def load_line_items(self, quote_id: str) -> List[LineItem]:
        """Lignes du devis sous forme calculateur, dans l'ordre d'affichage."""
        rows = self.client.find("quote_items", {"quoteid": quote_id}, order_by="order")
        return self._price_items(rows)

    def get_items(self, quote_id: str) -> List[Dict[str, Any]]:
        """Lignes enrichies (produit, catégorie) pour l'API et le PDF."""
        rows = self.client.find("quote_items", {"quoteid": quote_id}, order_by="order")
        lookup = self._product_categories([r.get("productid") for r in rows])
        items = []
        for row in rows:
            product = lookup.get(row.get("productid"), {})
            items.append({
                "id": row["id"],
                "product_id": row.get("productid"),
                "product_name": product.get("name"),
                "category_name": product.get("categoryname"),
                "unit": product.get("unit"),
                "description": row.get("description"),
                "quantity": float(row["quantity"]),
                "rate": float(row["rate"]),
                "discount": float(row["discount"]),
                "line_total": float(row["linetotal"]),
                "order": row.get("order") or 0,
                "dimensions": row.get("dimensions"),
            })
        return items

    # === Devis ===

    def _unique_quote_number(self) -> str:
        for _ in range(MAX_NUMBER_ATTEMPTS):
            number = generate_quote_number()
            if not self.client.find("quotes", {"quotenumber": number}):
                return number
        raise RuntimeError("Could not allocate a unique quote number")

    def create_quote(
        self,
        title: str,
        items: List[Dict[str, Any]],
        discount_mode: DiscountMode = DiscountMode.LINE_ITEM,
        overall_discount: Any = 0,
        tax_rate: Any = 0,
        client_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Quote:
        """
        Crée un devis DRAFT avec ses lignes et ses totaux calculés.

        Args:
            items: [{"productid", "description", "quantity", "rate", "discount", "order", "dimensions"}]
        """
        line_items = self._price_items(items)
        totals = compute_totals(line_items, discount_mode, overall_discount, tax_rate)

        quote_number = self._unique_quote_number()
        with self.client.transaction():
            row = self.client.insert("quotes", {
                "quotenumber": quote_number,
                "title": title,
                "clientid": client_id,
                "discountmode": DiscountMode(discount_mode).value,
                "overalldiscount": to_decimal(overall_discount),
                "taxrate": to_decimal(tax_rate),
                "status": QuoteStatus.DRAFT.value,
                "version": 1,
                "isapproved": False,
                "createdby": created_by,
                **_totals_columns(totals),
            })
            self._replace_items(row["id"], items, totals)

        logger.info(f"✅ Devis créé: {row['quotenumber']} ({len(items)} ligne(s), total {totals.grand_total})")
        return row_to_quote(row)

    def get_quote(self, quote_id: str) -> Quote:
        """
        Raises:
            RecordNotFound: si le devis n'existe pas
        """
        return row_to_quote(self.client.find_one("quotes", {"id": quote_id}))

    def list_quotes(self, status: Optional[QuoteStatus] = None) -> List[Quote]:
        filter = {"status": QuoteStatus(status).value} if status else None
        rows = self.client.find("quotes", filter, order_by="createdat", descending=True)
        return [row_to_quote(r) for r in rows]

    def update_quote(
        self,
        quote_id: str,
        fields: Dict[str, Any],
        items: Optional[List[Dict[str, Any]]] = None,
    ) -> Quote:
        """
        Modifie un devis DRAFT (champs et/ou lignes) et recalcule ses totaux.

        Args:
            fields: sous-ensemble de {title, clientid, discountmode, overalldiscount, taxrate}

        Raises:
            QuoteNotEditable: si le devis n'est plus en DRAFT
        """
        quote = self.get_quote(quote_id)
        if quote.status != QuoteStatus.DRAFT:
            raise QuoteNotEditable(quote.status)

        patch = dict(fields)
        mode = patch.get("discountmode", quote.discount_mode)
        overall = patch.get("overalldiscount", quote.overall_discount)
        tax_rate = patch.get("taxrate", quote.tax_rate)
        if "discountmode" in patch:
            patch["discountmode"] = DiscountMode(mode).value
        for column in ("overalldiscount", "taxrate"):
            if column in patch:
                patch[column] = to_decimal(patch[column])

        if items is not None:
            line_items = self._price_items(items)
        else:
            line_items = self.load_line_items(quote_id)
        totals = compute_totals(line_items, mode, overall, tax_rate)

        patch.update(_totals_columns(totals))
        patch["updatedat"] = datetime.now(timezone.utc)
        with self.client.transaction():
            if items is not None:
                self._replace_items(quote_id, items, totals)
            row = self.client.update("quotes", {"id": quote_id}, patch)
        return row_to_quote(row)

    def delete_quote(self, quote_id: str) -> None:
        """Suppression administrative (hors workflow) : lignes, révisions, devis."""
        self.get_quote(quote_id)
        with self.client.transaction():
            for table in ("quote_items", "quote_revisions"):
                try:
                    self.client.delete(table, {"quoteid": quote_id})
                except RecordNotFound:
                    pass
            self.client.delete("quotes", {"id": quote_id})
        logger.info(f"🗑️ Devis {quote_id} supprimé")

    # === Workflow ===

    def save_transition(self, quote: Quote) -> Quote:
        """Persiste statut, version, approbation et totaux figés."""
        row = self.client.update("quotes", {"id": quote.id}, {
            "status": QuoteStatus(quote.status).value,
            "version": quote.version,
            "isapproved": quote.is_approved,
            "approvedby": quote.approved_by,
            "approvedat": quote.approved_at,
            "approvalnotes": quote.approval_notes,
            "subtotal": quote.subtotal,
            "discount": quote.discount,
            "tax": quote.tax,
            "grandtotal": quote.grand_total,
            "updatedat": quote.updated_at or datetime.now(timezone.utc),
        })
        return row_to_quote(row)

    def append_revision(self, revision: QuoteRevision) -> QuoteRevision:
        row = self.client.insert("quote_revisions", {
            "quoteid": revision.quote_id,
            "version": revision.version,
            "status": QuoteStatus(revision.status).value,
            "exported_by": revision.exported_by,
            "exported_at": revision.exported_at,
            "changes": revision.changes,
            "notes": revision.notes,
        })
        return row_to_revision(row)

    def list_revisions(self, quote_id: str) -> List[QuoteRevision]:
        """Révisions du devis, la plus récente en premier."""
        rows = self.client.find(
            "quote_revisions", {"quoteid": quote_id}, order_by="exported_at", descending=True
        )
        return [row_to_revision(r) for r in rows]
