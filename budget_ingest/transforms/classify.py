"""
Concept classifier for budget-ingest.

Maps a free-text concept (e.g. "Impuestos directos", "Pensiones
contributivas") plus its category onto the closed type taxonomy.

Design: ordered rule tables
- ``INCOME_RULES`` / ``SPENDING_RULES`` are lists of ``Rule(name, predicate, type)``.
- ``classify()`` evaluates them in order; the first match wins.
- No match -> the category's catch-all (``other_revenues`` / ``other_spending``).

Rule order is significant: a concept can match several rules. For example
"Sanidad" matches the social-security/health rule before the healthcare rule,
and "Impuestos directos" is personal income tax even though "impuestos"
contains the letters "ue".

Matching is case- and accent-insensitive substring matching. Short acronyms
(``ue``, ``iva``, ``irpf``, ``vat``) must match as whole words.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Callable

from budget_ingest.models import BudgetType, Category, catch_all

Predicate = Callable[[str], bool]


def normalize_text(text: str) -> str:
    """Lower-case and strip accents: "Educación" -> "educacion"."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    return "".join(c for c in decomposed if not unicodedata.combining(c)).lower().strip()


def contains(*keywords: str) -> Predicate:
    """Predicate: any keyword occurs as a substring of the normalized text."""
    return lambda text: any(k in text for k in keywords)


def word(*tokens: str) -> Predicate:
    """Predicate: any token occurs as a whole word."""
    pattern = re.compile(r"\b(?:" + "|".join(re.escape(t) for t in tokens) + r")\b")
    return lambda text: bool(pattern.search(text))


def either(*predicates: Predicate) -> Predicate:
    return lambda text: any(p(text) for p in predicates)


@dataclass(frozen=True)
class Rule:
    name: str
    predicate: Predicate
    type: BudgetType

    def matches(self, text: str) -> bool:
        return self.predicate(text)


INCOME_RULES: list[Rule] = [
    Rule(
        "personal_income_tax",
        either(contains("impuestos directos", "renta", "personal income"), word("irpf")),
        BudgetType.PERSONAL_INCOME_TAX,
    ),
    Rule(
        "corporate_tax",
        contains("sociedades", "corporativo", "corporate"),
        BudgetType.CORPORATE_TAX,
    ),
    Rule(
        "vat",
        either(contains("impuestos indirectos", "value added"), word("iva", "vat")),
        BudgetType.VAT,
    ),
    Rule(
        "social_security_contributions",
        contains("seguridad social", "cotizaciones", "social security", "contributions"),
        BudgetType.SOCIAL_SECURITY_CONTRIBUTIONS,
    ),
    Rule(
        "regional_taxes",
        contains("comunidad", "autonoma", "territorial", "regional"),
        BudgetType.AUTONOMOUS_COMMUNITIES_TAXES,
    ),
    Rule(
        "eu_funds",
        either(contains("europa", "fondo europeo", "european"), word("ue", "eu")),
        BudgetType.EU_FUNDS,
    ),
    Rule(
        "fees_and_transfers",
        contains(
            "tasas", "precios", "transferencias", "patrimoniales", "enajenacion",
            "fees", "transfers",
        ),
        BudgetType.OTHER_REVENUES,
    ),
]

SPENDING_RULES: list[Rule] = [
    Rule("pensions", contains("pension"), BudgetType.PENSIONS),
    Rule(
        "social_security_and_health",
        contains("seguridad social", "sanidad", "salud", "social security"),
        BudgetType.SOCIAL_SECURITY,
    ),
    Rule("education", contains("educacion", "education"), BudgetType.EDUCATION),
    Rule(
        "healthcare",
        contains("sanidad", "salud", "sanitari", "hospital", "health"),
        BudgetType.HEALTHCARE,
    ),
    Rule(
        "defense",
        contains("defensa", "militar", "defense", "defence", "military"),
        BudgetType.DEFENSE,
    ),
    Rule(
        "infrastructure",
        contains("infraestructura", "obra publica", "infrastructure", "public works"),
        BudgetType.INFRASTRUCTURE,
    ),
    Rule(
        "public_administration",
        contains(
            "administracion", "personal", "bienes y servicios",
            "administration", "personnel",
        ),
        BudgetType.PUBLIC_ADMINISTRATION,
    ),
    Rule(
        "debt_interest",
        contains("interes", "deuda", "gastos financieros", "interest", "debt"),
        BudgetType.DEBT_INTEREST,
    ),
    Rule(
        "transfers_and_contingency",
        contains(
            "transferencias", "contingencia", "inversiones", "desempleo",
            "prestaciones", "servicios sociales",
            "transfers", "contingency", "investment", "unemployment",
        ),
        BudgetType.OTHER_SPENDING,
    ),
]

RULES: dict[Category, list[Rule]] = {
    Category.INCOME: INCOME_RULES,
    Category.SPENDING: SPENDING_RULES,
}


def match_rule(concept: str, category: Category) -> Rule | None:
    """Return the first rule matching *concept*, or ``None``."""
    text = normalize_text(concept)
    if not text:
        return None
    for rule in RULES[category]:
        if rule.matches(text):
            return rule
    return None


def classify(concept: str, category: Category) -> BudgetType:
    """Classify a concept into the type taxonomy of *category*.

    Always returns a type: the category catch-all when no rule matches.
    """
    rule = match_rule(concept, category)
    if rule is None:
        return catch_all(category)
    return rule.type
