"""
Data models for the rateio simulator
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

# item origins
ORIGIN_PRINCIPAL = "principal"
ORIGIN_CLAIMANT = "reclamante"
ORIGIN_RESPONDENT = "reclamada"

# synthetic item ids
PRINCIPAL_ID = "principal"
EMPLOYER_SHARE_ID = "reclamada_cs_empresa"
CONTRACTUAL_FEE_ID = "honorarios_contratuais"


@dataclass
class Entry:
    """Claimant discount or respondent debit"""
    id: str
    description: str
    amount: float  # non-negative


@dataclass
class ExtractedRecord:
    """Figures read from a settlement spreadsheet"""
    gross_claimant_credit: float
    discounts: List[Entry]
    respondent_debits: List[Entry]
    total_social_contribution: Optional[float] = None


@dataclass
class AllocatableItem:
    """Line item taking part in the rateio"""
    id: str
    description: str
    face_value: float
    origin: str  # principal / reclamante / reclamada
    selected: bool = True


@dataclass
class Deposit:
    """Judicial deposit"""
    id: str
    amount: float = 0.0


@dataclass
class ItemResult:
    """Paid / remaining split for one item"""
    paid: float
    remaining: float


@dataclass
class FeeSettings:
    """Contractual fee configuration"""
    enabled: bool = False
    percentage: float = 30.0
    deductible_ids: Set[str] = field(default_factory=set)  # discounts deducted from the fee base


@dataclass
class RateioState:
    """Complete page state owned by the controller"""
    deposits: List[Deposit]
    record: Optional[ExtractedRecord] = None
    error: Optional[str] = None
    fee: FeeSettings = field(default_factory=FeeSettings)
    items: List[AllocatableItem] = field(default_factory=list)
    result: Dict[str, ItemResult] = field(default_factory=dict)
    fee_share_ids: Set[str] = field(default_factory=set)
    renamed: Dict[str, str] = field(default_factory=dict)  # item id -> description typed in the rateio list
    number_of_lawyers: int = 1
    hide_zero_paid: bool = True
