"""
test_classification.py - Relabeling and consolidation of extracted figures
Run with: pytest tests/test_classification.py -v
"""
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from classification import (
    DEFAULT_BENEFICIARY,
    INSURED_LABEL,
    MarkerSet,
    TAG_EXPERT_FEE,
    TAG_LAWYER_FEE,
    TAG_OTHER,
    TAG_SOCIAL_CONTRIBUTION,
    classify_description,
    classify_extraction,
    extract_beneficiary,
    is_lawyer_fee_item,
)
from models import Entry, ExtractedRecord


def entry(description, amount, id_="raw"):
    return Entry(id=id_, description=description, amount=amount)


class TestClassifyDescription:

    def test_lawyer_fee_with_beneficiary(self):
        tag, name = classify_description("Honorários de Sucumbência devidos para Dr. João")
        assert tag == TAG_LAWYER_FEE
        assert name == "Dr. João"

    def test_beneficiary_stops_at_parenthesis_and_percentage(self):
        assert extract_beneficiary("HONORÁRIOS ADVOCATÍCIOS PARA MARIA SILVA (15%)") == "Maria Silva"
        assert extract_beneficiary("Honorários para Carlos Souza 10% sobre o crédito") == "Carlos Souza"

    def test_lawyer_fee_without_beneficiary_gets_placeholder(self):
        tag, name = classify_description("HONORÁRIOS ADVOCATÍCIOS")
        assert (tag, name) == (TAG_LAWYER_FEE, DEFAULT_BENEFICIARY)

    @pytest.mark.parametrize("desc", [
        "HONORÁRIOS PERICIAIS",
        "Honorários do Perito Contábil",
        "HONORÁRIOS PERICIAL ENGENHEIRO",
    ])
    def test_expert_fees_are_not_lawyer_fees(self, desc):
        assert classify_description(desc)[0] == TAG_EXPERT_FEE

    def test_social_contribution(self):
        assert classify_description("INSS - Cota Empresa")[0] == TAG_SOCIAL_CONTRIBUTION
        assert classify_description("contribuição social")[0] == TAG_SOCIAL_CONTRIBUTION

    def test_other(self):
        assert classify_description("Custas Processuais") == (TAG_OTHER, None)

    def test_custom_marker_set(self):
        markers = MarkerSet(lawyer_fee=("FEE",), expert=("EXPERT",), connectors=("to",))
        assert classify_description("Attorney fee to john doe", markers) == (TAG_LAWYER_FEE, "John Doe")
        assert classify_description("Expert fee", markers)[0] == TAG_EXPERT_FEE


class TestFeeShareHeuristic:

    @pytest.mark.parametrize("desc", [
        "Honorários de Sucumbência - Dr. João",
        "Honorarios Contratuais",
        "Verba do advogado",
    ])
    def test_matches(self, desc):
        assert is_lawyer_fee_item(desc)

    @pytest.mark.parametrize("desc", ["Honorários Periciais", "Custas", "Contribuição Social - Empresa"])
    def test_rejects(self, desc):
        assert not is_lawyer_fee_item(desc)


class TestClassifyExtraction:

    @pytest.fixture
    def raw(self):
        return ExtractedRecord(
            gross_claimant_credit=10000.0,
            discounts=[entry("INSS", 1000.0), entry("IRPF S/ RRA", 300.0)],
            respondent_debits=[
                entry("Honorários de Sucumbência devidos para Dr. João", 2000.0, "a"),
                entry("Honorários de Sucumbência devidos para Dr. João", 1000.0, "b"),
                entry("HONORÁRIOS PERICIAIS", 800.0, "c"),
                entry("CUSTAS PROCESSUAIS", 200.0, "d"),
                entry("INSS COTA EMPRESA", 1500.0, "e"),
            ],
            total_social_contribution=2500.0,
        )

    def test_discounts_relabeled(self, raw):
        out = classify_extraction(raw)
        assert [d.description for d in out.discounts] == [INSURED_LABEL, "Irpf s/ Rra"]

    def test_fees_consolidated_per_beneficiary(self, raw):
        out = classify_extraction(raw)
        fees = [d for d in out.respondent_debits if d.description.startswith("Honorários de Sucumbência")]
        assert len(fees) == 1
        assert fees[0].description == "Honorários de Sucumbência - Dr. João"
        assert fees[0].amount == 3000.0

    def test_non_fee_debits_title_cased_and_first(self, raw):
        out = classify_extraction(raw)
        descs = [d.description for d in out.respondent_debits]
        assert descs == [
            "Honorários Periciais",
            "Custas Processuais",
            "Inss Cota Empresa",
            "Honorários de Sucumbência - Dr. João",
        ]

    def test_fresh_ids(self, raw):
        out = classify_extraction(raw)
        ids = [e.id for e in out.discounts + out.respondent_debits]
        assert len(set(ids)) == len(ids)
        assert not set(ids) & {"raw", "a", "b", "c", "d", "e"}

    def test_scalars_kept(self, raw):
        out = classify_extraction(raw)
        assert out.gross_claimant_credit == 10000.0
        assert out.total_social_contribution == 2500.0

    def test_groups_by_beneficiary(self):
        raw = ExtractedRecord(
            gross_claimant_credit=0.0,
            discounts=[],
            respondent_debits=[
                entry("Honorários para Ana Lima", 100.0),
                entry("Honorários para Bruno Reis (10%)", 50.0),
                entry("HONORÁRIOS PARA ANA LIMA", 25.0),
                entry("Honorários advocatícios", 10.0),
            ],
        )
        out = classify_extraction(raw)
        totals = {d.description: d.amount for d in out.respondent_debits}
        assert totals == {
            "Honorários de Sucumbência - Ana Lima": 125.0,
            "Honorários de Sucumbência - Bruno Reis": 50.0,
            "Honorários de Sucumbência - Advogado": 10.0,
        }
