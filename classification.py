"""
Classification of freshly extracted spreadsheet figures.

Runs once right after a successful extraction:
- discounts carrying a social contribution marker get the canonical insured-party label
- lawyer fee debits are merged per beneficiary
- everything else is title-cased
All entries leave with newly minted ids.
"""
from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from models import Entry, ExtractedRecord
from utils import new_id, to_title_case

logger = logging.getLogger(__name__)

INSURED_LABEL = "Contribuição Social - Segurado"
EMPLOYER_LABEL = "Contribuição Social - Empresa"
SUCCESS_FEE_LABEL = "Honorários de Sucumbência - {}"
DEFAULT_BENEFICIARY = "Advogado"

TAG_SOCIAL_CONTRIBUTION = "social_contribution"
TAG_LAWYER_FEE = "lawyer_fee"
TAG_EXPERT_FEE = "expert_fee"
TAG_OTHER = "other"


@dataclass(frozen=True)
class MarkerSet:
    """Marker words used to classify descriptions (upper-case unless noted)"""
    social_contribution: Tuple[str, ...] = ("CONTRIBUIÇÃO SOCIAL", "INSS")
    lawyer_fee: Tuple[str, ...] = ("HONORÁRIOS",)
    expert: Tuple[str, ...] = ("PERICIAIS", "PERICIAL", "PERITO")
    connectors: Tuple[str, ...] = ("devidos para", "para")
    # lower-case keywords for the fee sharing heuristic
    fee_share: Tuple[str, ...] = (
        "honorário", "honorario",
        "sucumbência", "sucumbencia",
        "advocatício", "advocaticio",
        "contratual", "contratuais",
        "advogado",
    )

    def beneficiary_pattern(self) -> re.Pattern:
        alternatives = "|".join(re.escape(c) for c in self.connectors)
        return re.compile(rf"(?:{alternatives})\s(.*?)(?:\(|\d+%|$)", re.IGNORECASE)


DEFAULT_MARKERS = MarkerSet()


def has_marker(description: str, markers) -> bool:
    upper = (description or "").upper()
    return any(m in upper for m in markers)


def is_social_contribution(description: str, markers: MarkerSet = DEFAULT_MARKERS) -> bool:
    return has_marker(description, markers.social_contribution)


def is_insured_contribution(description: str) -> bool:
    return INSURED_LABEL.upper() in (description or "").upper()


def extract_beneficiary(description: str, markers: MarkerSet = DEFAULT_MARKERS) -> Optional[str]:
    """Name following a connector word, or None when absent"""
    match = markers.beneficiary_pattern().search(description or "")
    if not match:
        return None
    name = match.group(1).strip()
    return to_title_case(name) if name else None


def classify_description(
    description: str,
    markers: MarkerSet = DEFAULT_MARKERS
) -> Tuple[str, Optional[str]]:
    """
    Classify a respondent debit description.
    Returns (tag, beneficiary); beneficiary is only set for lawyer fees.
    """
    if has_marker(description, markers.lawyer_fee):
        if has_marker(description, markers.expert):
            return TAG_EXPERT_FEE, None
        return TAG_LAWYER_FEE, extract_beneficiary(description, markers) or DEFAULT_BENEFICIARY
    if is_social_contribution(description, markers):
        return TAG_SOCIAL_CONTRIBUTION, None
    return TAG_OTHER, None


def is_lawyer_fee_item(description: str, markers: MarkerSet = DEFAULT_MARKERS) -> bool:
    """Loose heuristic used to preselect items for fee sharing"""
    d = (description or "").lower()
    if any(m.lower() in d for m in markers.expert):
        return False
    return any(k in d for k in markers.fee_share)


def classify_discounts(discounts: List[Entry], markers: MarkerSet = DEFAULT_MARKERS) -> List[Entry]:
    out = []
    for d in discounts:
        if is_social_contribution(d.description, markers):
            desc = INSURED_LABEL
        else:
            desc = to_title_case(d.description)
        out.append(Entry(id=new_id(), description=desc, amount=float(d.amount)))
    return out


def consolidate_debits(debits: List[Entry], markers: MarkerSet = DEFAULT_MARKERS) -> List[Entry]:
    """Title-case ordinary debits and merge lawyer fees by beneficiary"""
    others = []
    fees: Dict[str, float] = {}
    for d in debits:
        tag, beneficiary = classify_description(d.description, markers)
        if tag == TAG_LAWYER_FEE:
            fees[beneficiary] = fees.get(beneficiary, 0.0) + float(d.amount)
        else:
            others.append(Entry(id=new_id(), description=to_title_case(d.description), amount=float(d.amount)))

    consolidated = [
        Entry(id=new_id(), description=SUCCESS_FEE_LABEL.format(name), amount=total)
        for name, total in fees.items()
    ]
    return others + consolidated


def classify_extraction(record: ExtractedRecord, markers: MarkerSet = DEFAULT_MARKERS) -> ExtractedRecord:
    """Turn a raw extraction into the canonical record used by the rateio"""
    discounts = classify_discounts(record.discounts, markers)
    debits = consolidate_debits(record.respondent_debits, markers)
    logger.info(
        "Classified extraction: %d discounts, %d debits (%d raw debits)",
        len(discounts), len(debits), len(record.respondent_debits)
    )
    return ExtractedRecord(
        gross_claimant_credit=float(record.gross_claimant_credit),
        discounts=discounts,
        respondent_debits=debits,
        total_social_contribution=record.total_social_contribution,
    )
