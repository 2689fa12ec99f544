"""
services/pdf_renderer.py
Rendu PDF d'un devis (reportlab)

render_quote_pdf(quote_data, template=None) -> bytes

quote_data : QuoteOut sérialisé (snake_case) + "client" optionnel
template   : surcharges optionnelles {company_name, accent_color, currency_symbol,
             footer_text, terms}
"""

import io
import logging
from typing import Any, Dict, List, Optional

from reportlab.lib.colors import HexColor, black
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from core.config import settings
from services.quote_calculator import format_currency

logger = logging.getLogger(__name__)

PAGE_W, PAGE_H = A4
LM, RM = 40, PAGE_W - 40
TOP = PAGE_H - 50
ROW_H = 18
BOTTOM_MARGIN = 80

# Les polices PDF standard (Helvetica) n'ont pas de glyphe pour ces symboles
PDF_SYMBOLS = {"₹": "Rs."}

DEFAULT_TEMPLATE = {
    "accent_color": "#1a2744",
    "header_bg": "#e8ecf4",
    "footer_text": "Thank you for your business.",
}

# (titre, clé, x, alignement)
COLUMNS = [
    ("#", None, LM + 4, "L"),
    ("Item", "product_name", LM + 24, "L"),
    ("Qty", "quantity", LM + 300, "R"),
    ("Rate", "rate", LM + 380, "R"),
    ("Disc %", "discount", LM + 430, "R"),
    ("Amount", "line_total", RM - 4, "R"),
]


def _draw(c: canvas.Canvas, x: float, y: float, text: str, align: str = "L") -> None:
    if align == "R":
        c.drawRightString(x, y, text)
    else:
        c.drawString(x, y, text)


def _draw_header(c: canvas.Canvas, quote: Dict[str, Any], tpl: Dict[str, Any]) -> float:
    accent = HexColor(tpl["accent_color"])

    c.setFillColor(accent)
    c.setFont("Helvetica-Bold", 18)
    c.drawString(LM, TOP, tpl["company_name"])

    c.setFont("Helvetica-Bold", 26)
    c.drawRightString(RM, TOP, "QUOTATION")
    c.setStrokeColor(accent)
    c.setLineWidth(2)
    c.line(RM - 175, TOP - 8, RM, TOP - 8)

    c.setFillColor(black)
    c.setFont("Helvetica", 10)
    y = TOP - 30
    for label, value in (
        ("Quote #", quote.get("quote_number", "")),
        ("Version", str(quote.get("version") or 1)),
        ("Status", str(quote.get("status", ""))),
        ("Date", str(quote.get("updated_at") or quote.get("created_at") or "")[:10]),
    ):
        c.drawRightString(RM - 90, y, f"{label}:")
        c.drawRightString(RM, y, value)
        y -= 14

    client = quote.get("client") or {}
    cy = TOP - 30
    c.setFont("Helvetica-Bold", 10)
    c.drawString(LM, cy, "Bill to:")
    c.setFont("Helvetica", 10)
    for line in (client.get("name"), client.get("company"), client.get("email"), client.get("phone"), client.get("address")):
        if line:
            cy -= 14
            c.drawString(LM, cy, str(line))

    c.setFont("Helvetica-Bold", 12)
    title_y = min(y, cy) - 24
    c.drawString(LM, title_y, quote.get("title", ""))
    return title_y - 20


def _draw_table_header(c: canvas.Canvas, y: float, tpl: Dict[str, Any]) -> float:
    c.setFillColor(HexColor(tpl["header_bg"]))
    c.rect(LM, y - 5, RM - LM, ROW_H, fill=1, stroke=0)
    c.setFillColor(black)
    c.setFont("Helvetica-Bold", 9)
    for title, _, x, align in COLUMNS:
        _draw(c, x, y, title, align)
    return y - ROW_H


def _draw_items(c: canvas.Canvas, y: float, items: List[Dict[str, Any]], tpl: Dict[str, Any]) -> float:
    symbol = tpl["currency_symbol"]
    y = _draw_table_header(c, y, tpl)
    page_num = 1

    for index, item in enumerate(items, 1):
        if y < BOTTOM_MARGIN:
            c.setFont("Helvetica", 8)
            c.drawRightString(RM, 25, f"Page {page_num}")
            c.showPage()
            page_num += 1
            y = _draw_table_header(c, TOP, tpl)

        c.setFont("Helvetica", 9)
        name = item.get("product_name") or item.get("description") or ""
        if item.get("category_name"):
            name = f"{name} ({item['category_name']})"
        _draw(c, COLUMNS[0][2], y, str(index))
        _draw(c, COLUMNS[1][2], y, name[:55])
        _draw(c, COLUMNS[2][2], y, f"{item.get('quantity', 0):g} {item.get('unit') or ''}".strip(), "R")
        _draw(c, COLUMNS[3][2], y, format_currency(item.get("rate", 0), symbol), "R")
        _draw(c, COLUMNS[4][2], y, f"{item.get('discount', 0):g}", "R")
        _draw(c, COLUMNS[5][2], y, format_currency(item.get("line_total", 0), symbol), "R")

        c.setStrokeColor(HexColor("#cccccc"))
        c.setLineWidth(0.3)
        c.line(LM, y - 5, RM, y - 5)
        y -= ROW_H

    return y


def _draw_totals(c: canvas.Canvas, y: float, quote: Dict[str, Any], tpl: Dict[str, Any]) -> float:
    symbol = tpl["currency_symbol"]
    if y < BOTTOM_MARGIN + 5 * ROW_H:
        c.showPage()
        y = TOP

    rows = [
        ("Subtotal", quote.get("subtotal", 0)),
        (f"Discount ({quote.get('overall_discount', 0):g}%)", quote.get("discount", 0)),
        (f"Tax ({quote.get('tax_rate', 0):g}%)", quote.get("tax", 0)),
    ]
    y -= 10
    c.setFont("Helvetica", 10)
    for label, amount in rows:
        c.drawRightString(RM - 110, y, label)
        c.drawRightString(RM, y, format_currency(amount, symbol))
        y -= ROW_H

    c.setFillColor(HexColor(tpl["header_bg"]))
    c.rect(RM - 230, y - 6, 230, ROW_H + 2, fill=1, stroke=0)
    c.setFillColor(black)
    c.setFont("Helvetica-Bold", 11)
    c.drawRightString(RM - 110, y, "Grand Total")
    c.drawRightString(RM, y, format_currency(quote.get("grand_total", 0), symbol))
    return y - 2 * ROW_H


def _draw_footer(c: canvas.Canvas, y: float, tpl: Dict[str, Any]) -> None:
    terms = tpl.get("terms")
    if terms:
        c.setFont("Helvetica-Bold", 10)
        c.drawString(LM, y, "Terms and Conditions")
        c.setFont("Helvetica", 8)
        for line in str(terms).splitlines():
            y -= 11
            if y < 40:
                break
            c.drawString(LM, y, line[:120])

    c.setFont("Helvetica-Oblique", 8)
    c.setFillColor(HexColor("#888888"))
    c.drawCentredString(PAGE_W / 2, 25, tpl["footer_text"])


def render_quote_pdf(quote_data: Dict[str, Any], template: Optional[Dict[str, Any]] = None) -> bytes:
    """
    Génère le PDF d'un devis.

    Args:
        quote_data: devis (champs QuoteOut) avec items et client optionnel
        template: surcharges de présentation

    Returns:
        Contenu PDF (bytes)
    """
    tpl = {
        **DEFAULT_TEMPLATE,
        "company_name": settings.company_name,
        "currency_symbol": settings.currency_symbol,
        **(template or {}),
    }

    tpl["currency_symbol"] = PDF_SYMBOLS.get(tpl["currency_symbol"], tpl["currency_symbol"])

    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Quote {quote_data.get('quote_number', '')}")

    y = _draw_header(c, quote_data, tpl)
    y = _draw_items(c, y, quote_data.get("items") or [], tpl)
    y = _draw_totals(c, y, quote_data, tpl)
    _draw_footer(c, y, tpl)

    c.showPage()
    c.save()

    pdf = buffer.getvalue()
    logger.info(f"📄 PDF généré pour {quote_data.get('quote_number')} ({len(pdf)} octets)")
    return pdf
