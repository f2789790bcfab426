"""Keyword tables for transaction extraction (pt-BR).

These are business configuration, not algorithm: they encode the
categories the household/clinic ledger uses. Matching is done on the
lowercased message, by substring, and the first category that matches
wins, so table order matters.
"""

INCOME_KEYWORDS: tuple[str, ...] = (
    "recebi",
    "ganhei",
    "entrada",
    "salário",
    "salario",
    "receita",
)

CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Alimentação", ("comida", "alimento", "supermercado", "mercado", "padaria", "restaurante")),
    ("Transporte", ("combustível", "combustivel", "gasolina", "uber", "taxi", "ônibus", "onibus")),
    ("Saúde", ("farmácia", "farmacia", "remédio", "remedio", "médico", "medico", "hospital")),
    ("Moradia", ("aluguel", "condomínio", "condominio", "luz", "água", "agua", "internet")),
    ("Educação", ("curso", "escola", "faculdade", "livro")),
    ("Lazer", ("cinema", "show", "viagem", "hotel")),
)

DEFAULT_CATEGORY = "Outros"

CLINIC_KEYWORDS: tuple[str, ...] = (
    "clínica",
    "clinica",
    "consultório",
    "consultorio",
)
