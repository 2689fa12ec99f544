"""
services/quote_calculator.py
Calcul des totaux de devis (sous-total, remises, taxe, total, contributions)

Fonction pure : aucun I/O, aucun état. Appelée à chaque frappe pour
l'aperçu, et par le workflow pour figer les totaux au changement de statut.

Politique d'arrondi : calcul en précision complète (Decimal), arrondi
ROUND_HALF_UP à 2 décimales uniquement sur les champs de sortie.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Context, Decimal, DivisionByZero, InvalidOperation, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")

# Dépassement de capacité -> Infinity / NaN au lieu d'une exception ;
# round_money ramène ensuite tout montant non fini à 0.
MONEY_CONTEXT = Context(traps=[DivisionByZero])


class DiscountMode(str, Enum):
    """Combinaison des remises ligne / globale"""
    LINE_ITEM = "LINE_ITEM"
    OVERALL = "OVERALL"
    BOTH = "BOTH"


@dataclass
class LineItem:
    """Ligne de devis utilisée pour le calcul"""
    quantity: Any
    rate: Any
    discount_percent: Any = 0
    category_id: Optional[str] = None
    category_name: Optional[str] = None


@dataclass
class CategoryContribution:
    category_name: str
    total: Decimal


@dataclass
class QuoteTotals:
    """Totaux dérivés d'une liste de lignes"""
    subtotal: Decimal = ZERO
    discount_amount: Decimal = ZERO
    taxable_amount: Decimal = ZERO
    tax: Decimal = ZERO
    grand_total: Decimal = ZERO
    line_totals: List[Decimal] = field(default_factory=list)
    category_contributions: List[CategoryContribution] = field(default_factory=list)

    def contributions_as_pairs(self) -> List[Tuple[str, Decimal]]:
        return [(c.category_name, c.total) for c in self.category_contributions]


def to_decimal(value: Any) -> Decimal:
    """Convertit en Decimal ; NaN, infini ou valeur illisible -> 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return ZERO
    if not result.is_finite():
        return ZERO
    return result


def _non_negative(value: Any) -> Decimal:
    return max(ZERO, to_decimal(value))


def _clamp_percent(value: Any) -> Decimal:
    return min(HUNDRED, _non_negative(value))


def round_money(value: Decimal) -> Decimal:
    """Arrondi ROUND_HALF_UP à 2 décimales, quelle que soit la taille du montant."""
    if not value.is_finite():
        return ZERO
    with localcontext() as ctx:
        # chiffres entiers + 2 décimales
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _line_total_exact(item: LineItem) -> Decimal:
    quantity = _non_negative(item.quantity)
    rate = _non_negative(item.rate)
    discount = _clamp_percent(item.discount_percent)
    return quantity * rate * (1 - discount / HUNDRED)


def calculate_line_total(quantity: Any, rate: Any, discount_percent: Any = 0) -> Decimal:
    """Total d'une ligne : quantité × prix × (1 - remise/100), arrondi à 2 décimales."""
    with localcontext(MONEY_CONTEXT):
        return round_money(_line_total_exact(LineItem(quantity, rate, discount_percent)))


def compute_totals(
    items: Iterable[LineItem],
    mode: DiscountMode,
    overall_discount_percent: Any = 0,
    tax_rate_percent: Any = 0,
) -> QuoteTotals:
    """
    Calcule les totaux d'un devis.

    La remise de ligne est toujours appliquée (propriété de la ligne) ;
    la remise globale s'ajoute en mode OVERALL ou BOTH.
    Les pourcentages hors [0,100] sont acceptés, mais aucun total ne
    devient négatif.

    Args:
        items: Lignes du devis (peut être vide)
        mode: DiscountMode (ou sa valeur texte)
        overall_discount_percent: Remise globale en %
        tax_rate_percent: Taux de taxe en %

    Returns:
        QuoteTotals arrondis à 2 décimales
    """
    try:
        mode = DiscountMode(mode)
    except ValueError:
        mode = DiscountMode.LINE_ITEM
    items = list(items)

    with localcontext(MONEY_CONTEXT):
        line_totals = [_line_total_exact(item) for item in items]
        subtotal = sum(line_totals, ZERO)

        discount_amount = ZERO
        if mode in (DiscountMode.OVERALL, DiscountMode.BOTH):
            discount_amount = max(ZERO, subtotal * to_decimal(overall_discount_percent) / HUNDRED)

        taxable_amount = max(ZERO, subtotal - discount_amount)
        tax = max(ZERO, taxable_amount * to_decimal(tax_rate_percent) / HUNDRED)
        grand_total = taxable_amount + tax

        # Contributions par catégorie, ordre de première apparition
        groups: Dict[Optional[str], List] = {}
        for item, line_total in zip(items, line_totals):
            key = item.category_id
            if key not in groups:
                label = item.category_name or (str(key) if key is not None else "Uncategorized")
                groups[key] = [label, ZERO]
            groups[key][1] += line_total

        return QuoteTotals(
            subtotal=round_money(subtotal),
            discount_amount=round_money(discount_amount),
            taxable_amount=round_money(taxable_amount),
            tax=round_money(tax),
            grand_total=round_money(grand_total),
            line_totals=[round_money(t) for t in line_totals],
            category_contributions=[
                CategoryContribution(category_name=label, total=round_money(total))
                for label, total in groups.values()
            ],
        )


def generate_quote_number(now: Optional[datetime] = None) -> str:
    """Numéro de devis QT-YYYYMM-NNNN."""
    now = now or datetime.now()
    return f"QT-{now.year}{now.month:02d}-{random.randint(0, 9999):04d}"


def format_currency(amount: Any, symbol: str = "₹") -> str:
    """
    Formate un montant avec le groupement indien (1,23,456.78).
    """
    value = round_money(to_decimal(amount))
    sign = "-" if value < 0 else ""
    integer_part, decimal_part = f"{abs(value):.2f}".split(".")

    if len(integer_part) > 3:
        head, tail = integer_part[:-3], integer_part[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        integer_part = ",".join(groups + [tail])

    return f"{symbol} {sign}{integer_part}.{decimal_part}"
