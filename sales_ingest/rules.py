"""
Deterministic normalization rules.

This file exists to make the header vocabulary and the defaults explicit.
"""

BOM = "\ufeff"
QUOTE = '"'
COMMA = ","
SEMICOLON = ";"

DEFAULT_PRODUCT = "Produto Indefinido"
DEFAULT_SOURCE = "Direto"

# Substrings matched against normalized header keys, first column wins.
FIELD_KEYWORDS = {
    "date": ("data",),
    "product": ("produto", "curso", "item"),
    "quantity": ("quantidade", "vendas", "qtd"),
    "revenue": ("receita", "valor", "total", "faturamento"),
    "source": ("origem", "fonte", "utm", "canal"),
    "cost": ("custo", "investimento"),
}

FILTER_ACTIVITY = "activity"            # revenue > 0 or quantity > 0
FILTER_NAMED_PRODUCT = "named_product"  # product != default or revenue > 0
FILTER_POLICIES = (FILTER_ACTIVITY, FILTER_NAMED_PRODUCT)

ACCEPTED_UPLOAD_SUFFIXES = (".csv", ".txt")
