"""
Business logic and computations for the rateio simulator
"""
from __future__ import annotations
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Set, Tuple

from classification import (
    EMPLOYER_LABEL,
    is_insured_contribution,
    is_lawyer_fee_item,
    is_social_contribution,
)
from models import (
    AllocatableItem,
    CONTRACTUAL_FEE_ID,
    Deposit,
    EMPLOYER_SHARE_ID,
    Entry,
    ExtractedRecord,
    FeeSettings,
    ItemResult,
    ORIGIN_CLAIMANT,
    ORIGIN_PRINCIPAL,
    ORIGIN_RESPONDENT,
    PRINCIPAL_ID,
)
from utils import new_id

PRINCIPAL_LABEL = "Crédito Líquido do Reclamante"
CONTRACTUAL_FEE_LABEL = "Honorários Contratuais"
ZERO_PAID_EPS = 0.005


# ---------- Record figures ----------
def total_discounts(record: ExtractedRecord) -> float:
    return sum(d.amount for d in record.discounts)


def net_claimant_credit(record: ExtractedRecord) -> float:
    """Gross credit minus every discount, never negative"""
    return max(0.0, record.gross_claimant_credit - total_discounts(record))


def contractual_fee_amount(record: ExtractedRecord, fee: FeeSettings) -> float:
    """Fee over gross credit minus the discounts flagged as deductible"""
    if not fee.enabled:
        return 0.0
    deductible = sum(d.amount for d in record.discounts if d.id in fee.deductible_ids)
    base = max(0.0, record.gross_claimant_credit - deductible)
    return base * max(0.0, fee.percentage) / 100


# ---------- Projection ----------
def _reconcile_social_contribution(record: ExtractedRecord) -> Tuple[List[Entry], List[Entry]]:
    """
    Returns (debits, extras).
    With a combined total, the respondent's contribution debit is replaced
    by the employer share (total debit - insured discount); otherwise the
    debit is just relabeled.
    """
    debits = list(record.respondent_debits)
    extras: List[Entry] = []
    insured = next((d for d in record.discounts if is_insured_contribution(d.description)), None)

    if record.total_social_contribution and record.total_social_contribution > 0 and insured:
        combined = next((d for d in debits if is_social_contribution(d.description)), None)
        if combined:
            debits = [d for d in debits if d.id != combined.id]
            employer_share = combined.amount - insured.amount
            if employer_share > 0:
                extras.append(Entry(EMPLOYER_SHARE_ID, EMPLOYER_LABEL, employer_share))
    else:
        debits = [
            replace(d, description=EMPLOYER_LABEL) if is_social_contribution(d.description) else d
            for d in debits
        ]
    return debits, extras


def _sort_key(item: AllocatableItem):
    return (item.id != PRINCIPAL_ID, -item.face_value)


def build_rateio_items(
    record: ExtractedRecord,
    fee: FeeSettings,
    previous: Optional[Iterable[AllocatableItem]] = None,
    renamed: Optional[Dict[str, str]] = None
) -> List[AllocatableItem]:
    """
    Flatten debits, discounts and the net credit into allocatable items.
    Selection flags of `previous` survive by id; `renamed` maps item ids
    to descriptions the user typed in the rateio list.
    """
    debits, extras = _reconcile_social_contribution(record)

    items = [AllocatableItem(d.id, d.description, d.amount, ORIGIN_RESPONDENT) for d in debits + extras]
    items += [AllocatableItem(d.id, d.description, d.amount, ORIGIN_CLAIMANT) for d in record.discounts]

    principal_value = net_claimant_credit(record)
    fee_value = contractual_fee_amount(record, fee)
    if fee_value > 0:
        items.append(AllocatableItem(CONTRACTUAL_FEE_ID, CONTRACTUAL_FEE_LABEL, fee_value, ORIGIN_RESPONDENT))
        principal_value = max(0.0, principal_value - fee_value)
    items.append(AllocatableItem(PRINCIPAL_ID, PRINCIPAL_LABEL, principal_value, ORIGIN_PRINCIPAL))

    if previous:
        prev = {p.id: p for p in previous}
        for item in items:
            p = prev.get(item.id)
            if p is not None:
                item.selected = p.selected
    for item in items:
        if item.id in (renamed or {}):
            item.description = renamed[item.id]

    items.sort(key=_sort_key)
    return items


# ---------- Allocation ----------
def total_deposits(deposits: Iterable[Deposit]) -> float:
    return sum(d.amount or 0.0 for d in deposits)


def split_face_value(face_value: float, paid: float) -> ItemResult:
    """Paid / remaining pair whose float sum is exactly face_value"""
    if paid * 2 >= face_value:
        return ItemResult(paid=paid, remaining=face_value - paid)
    remaining = face_value - paid
    return ItemResult(paid=face_value - remaining, remaining=remaining)


def proportional_factor(total_eligible: float, pool: float) -> float:
    """Share of each eligible face value that the pool can pay"""
    if total_eligible <= 0 or pool <= 0:
        return 0.0
    return 1.0 if pool >= total_eligible else pool / total_eligible


def compute_allocation(items: List[AllocatableItem], deposits: Iterable[Deposit]) -> Dict[str, ItemResult]:
    """Distribute the deposit pool over selected items proportionally to face value"""
    eligible = [i for i in items if i.selected and i.face_value > 0]
    factor = proportional_factor(sum(i.face_value for i in eligible), total_deposits(deposits))

    result = {i.id: ItemResult(paid=0.0, remaining=i.face_value) for i in items}
    if factor <= 0:
        return result
    for i in eligible:
        result[i.id] = split_face_value(i.face_value, i.face_value * factor)
    return result


def override_paid(
    result: Dict[str, ItemResult],
    item: AllocatableItem,
    requested: float
) -> Dict[str, ItemResult]:
    """Manual edit of one paid value, clamped to [0, face value]; other items untouched"""
    paid = max(0.0, min(float(requested), item.face_value))
    out = dict(result)
    out[item.id] = split_face_value(item.face_value, paid)
    return out


# ---------- Fee sharing ----------
def default_fee_share_ids(items: Iterable[AllocatableItem]) -> Set[str]:
    return {i.id for i in items if is_lawyer_fee_item(i.description)}


def compute_fee_share(
    result: Dict[str, ItemResult],
    fee_ids: Iterable[str],
    number_of_lawyers: int
) -> Tuple[float, float]:
    """Returns (total fees paid, amount per lawyer)"""
    total = sum(result[i].paid for i in fee_ids if i in result)
    n = max(1, int(number_of_lawyers))
    return total, total / n


# ---------- Summary / display ----------
def compute_summary(
    items: List[AllocatableItem],
    result: Dict[str, ItemResult],
    deposits: Iterable[Deposit]
) -> Dict[str, float]:
    """
    Totals shown below the rateio table.
    Returns dict with to_allocate, deposits, paid, debt, remaining, balance
    """
    deposited = total_deposits(deposits)
    paid = sum(r.paid for r in result.values())
    debt = sum(i.face_value for i in items)
    return {
        "to_allocate": sum(i.face_value for i in items if i.selected),
        "deposits": deposited,
        "paid": paid,
        "debt": debt,
        "remaining": debt - paid,
        "balance": deposited - paid,  # negative only after manual overrides
    }


def visible_items(
    items: List[AllocatableItem],
    result: Dict[str, ItemResult],
    hide_zero_paid: bool
) -> List[AllocatableItem]:
    if not hide_zero_paid:
        return list(items)
    return [i for i in items if i.id in result and result[i.id].paid > ZERO_PAID_EPS]


# ---------- Immutable updates ----------
def update_item_selected(items: List[AllocatableItem], item_id: str, selected: bool) -> List[AllocatableItem]:
    return [replace(i, selected=selected) if i.id == item_id else i for i in items]


def update_item_description(items: List[AllocatableItem], item_id: str, description: str) -> List[AllocatableItem]:
    return [replace(i, description=description) if i.id == item_id else i for i in items]


def update_entry_description(entries: List[Entry], entry_id: str, description: str) -> List[Entry]:
    return [replace(e, description=description) if e.id == entry_id else e for e in entries]


def update_entry_amount(entries: List[Entry], entry_id: str, amount: float) -> List[Entry]:
    return [replace(e, amount=max(0.0, float(amount))) if e.id == entry_id else e for e in entries]


def add_entry(entries: List[Entry], description: str = "", amount: float = 0.0) -> List[Entry]:
    return entries + [Entry(new_id(), description, max(0.0, float(amount)))]


def remove_entry(entries: List[Entry], entry_id: str) -> List[Entry]:
    return [e for e in entries if e.id != entry_id]


def add_deposit(deposits: List[Deposit]) -> List[Deposit]:
    return deposits + [Deposit(new_id(), 0.0)]


def update_deposit_amount(deposits: List[Deposit], deposit_id: str, amount: float) -> List[Deposit]:
    return [replace(d, amount=max(0.0, float(amount))) if d.id == deposit_id else d for d in deposits]


def remove_deposit(deposits: List[Deposit], deposit_id: str) -> List[Deposit]:
    """Removing the last deposit zeroes it instead"""
    if len(deposits) > 1:
        return [d for d in deposits if d.id != deposit_id]
    if not deposits:
        return [Deposit(new_id(), 0.0)]
    return [Deposit(deposits[0].id, 0.0)]
