"""
Unit tests for the concept classifier (budget_ingest.transforms.classify).

Rule order matters, so several tests pin which of two plausible types a
concept lands in.
"""

from __future__ import annotations

import pytest

from budget_ingest.models import BudgetType, Category, TYPES_BY_CATEGORY
from budget_ingest.transforms.classify import (
    INCOME_RULES,
    SPENDING_RULES,
    classify,
    match_rule,
    normalize_text,
)


class TestNormalizeText:
    def test_lowercases_and_strips_accents(self):
        assert normalize_text("  Educación Pública ") == "educacion publica"

    def test_none_safe(self):
        assert normalize_text(None) == ""


class TestIncomeClassification:
    @pytest.mark.parametrize("concept, expected", [
        ("Impuestos directos", BudgetType.PERSONAL_INCOME_TAX),
        ("Impuesto sobre la Renta de las Personas Físicas", BudgetType.PERSONAL_INCOME_TAX),
        ("IRPF", BudgetType.PERSONAL_INCOME_TAX),
        ("Impuesto sobre Sociedades", BudgetType.CORPORATE_TAX),
        ("Impuestos indirectos", BudgetType.VAT),
        ("IVA", BudgetType.VAT),
        ("Cotizaciones sociales", BudgetType.SOCIAL_SECURITY_CONTRIBUTIONS),
        ("Tributos de la Comunidad Autónoma", BudgetType.AUTONOMOUS_COMMUNITIES_TAXES),
        ("Fondos de la UE", BudgetType.EU_FUNDS),
        ("Fondo Europeo de Garantía Agraria", BudgetType.EU_FUNDS),
        ("Tasas y precios públicos", BudgetType.OTHER_REVENUES),
    ])
    def test_income_concepts(self, concept, expected):
        assert classify(concept, Category.INCOME) is expected

    def test_acronym_inside_word_does_not_match(self):
        """'Impuestos' contains the letters 'ue'; acronyms only match as whole words."""
        assert classify("Impuestos especiales", Category.INCOME) is BudgetType.OTHER_REVENUES
        assert classify("Aportaciones de la UE", Category.INCOME) is BudgetType.EU_FUNDS

    @pytest.mark.parametrize("concept", ["Lotería Nacional", "xyz-unmatched"])
    def test_unmatched_income_is_other_revenues(self, concept):
        assert classify(concept, Category.INCOME) is BudgetType.OTHER_REVENUES


class TestSpendingClassification:
    @pytest.mark.parametrize("concept, expected", [
        ("Pensiones contributivas", BudgetType.PENSIONS),
        ("Seguridad Social", BudgetType.SOCIAL_SECURITY),
        ("Educación", BudgetType.EDUCATION),
        ("Hospitales", BudgetType.HEALTHCARE),
        ("Defensa", BudgetType.DEFENSE),
        ("Infraestructuras", BudgetType.INFRASTRUCTURE),
        ("Gastos de personal", BudgetType.PUBLIC_ADMINISTRATION),
        ("Intereses de la deuda", BudgetType.DEBT_INTEREST),
        ("Transferencias corrientes", BudgetType.OTHER_SPENDING),
    ])
    def test_spending_concepts(self, concept, expected):
        assert classify(concept, Category.SPENDING) is expected

    def test_sanidad_matches_social_security_first(self):
        assert classify("Sanidad", Category.SPENDING) is BudgetType.SOCIAL_SECURITY

    def test_unmatched_spending_is_other_spending(self):
        assert classify("Cultura", Category.SPENDING) is BudgetType.OTHER_SPENDING

    def test_empty_concept_is_catch_all(self):
        assert classify("", Category.SPENDING) is BudgetType.OTHER_SPENDING
        assert match_rule("", Category.SPENDING) is None


class TestRuleTables:
    def test_rule_types_stay_in_their_category(self):
        for rule in INCOME_RULES:
            assert rule.type in TYPES_BY_CATEGORY[Category.INCOME]
        for rule in SPENDING_RULES:
            assert rule.type in TYPES_BY_CATEGORY[Category.SPENDING]

    def test_match_rule_returns_rule_name(self):
        rule = match_rule("Pensiones no contributivas", Category.SPENDING)
        assert rule is not None
        assert rule.name == "pensions"

    def test_same_concept_differs_by_category(self):
        assert classify("Seguridad Social", Category.INCOME) is BudgetType.SOCIAL_SECURITY_CONTRIBUTIONS
        assert classify("Seguridad Social", Category.SPENDING) is BudgetType.SOCIAL_SECURITY
