# models module
"""
Package models pour les modèles d'API DesignQuote
"""

from .data_models import QuoteCreate, QuoteUpdate, QuoteOut, QuoteTotalsOut, CalculateRequest

__all__ = ['QuoteCreate', 'QuoteUpdate', 'QuoteOut', 'QuoteTotalsOut', 'CalculateRequest']
