"""
Controller owning the page state.

Every event mutates RateioState and then re-derives items and results
in the fixed order projection -> allocation. Classification only runs
when a new extraction is loaded.
"""
from __future__ import annotations
import logging
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple

from classification import MarkerSet, DEFAULT_MARKERS, classify_extraction
from computations import (
    add_deposit,
    add_entry,
    build_rateio_items,
    compute_allocation,
    compute_fee_share,
    compute_summary,
    default_fee_share_ids,
    override_paid,
    remove_deposit,
    remove_entry,
    update_deposit_amount,
    update_entry_amount,
    update_entry_description,
    update_item_description,
    update_item_selected,
    visible_items,
)
from config import Settings, get_default_state
from extraction import ExtractionError
from models import AllocatableItem, Entry, ExtractedRecord, RateioState

logger = logging.getLogger(__name__)

DISCOUNTS = "discounts"
DEBITS = "respondent_debits"


class RateioSession:
    """Top-level controller for one page session"""

    def __init__(self, settings: Optional[Settings] = None, markers: MarkerSet = DEFAULT_MARKERS):
        self.settings = settings or Settings()
        self.markers = markers
        self.state: RateioState = get_default_state(self.settings)

    # ---------- Pipeline ----------
    def _recompute(self):
        """Projection then allocation; drops any manual override"""
        st = self.state
        if st.record is None:
            st.items, st.result, st.fee_share_ids = [], {}, set()
            return
        old_labels = {(i.id, i.description) for i in st.items}
        st.items = build_rateio_items(st.record, st.fee, st.items, st.renamed)
        if {(i.id, i.description) for i in st.items} != old_labels:
            st.fee_share_ids = default_fee_share_ids(st.items)
        self._reallocate()

    def _reallocate(self):
        self.state.result = compute_allocation(self.state.items, self.state.deposits)

    # ---------- Extraction ----------
    def load_extraction(self, raw: ExtractedRecord):
        """Classify a fresh extraction and make it the current record"""
        st = self.state
        st.record = classify_extraction(raw, self.markers)
        st.error = None
        st.items = []
        st.renamed = {}
        st.fee = replace(st.fee, deductible_ids={d.id for d in st.record.discounts})
        self._recompute()

    def fail_extraction(self, message: str):
        logger.warning("Extraction failed: %s", message)
        self.state.record = None
        self.state.error = message
        self.state.items = []
        self.state.renamed = {}
        self._recompute()

    def run_extraction(self, extract: Callable[[], ExtractedRecord]) -> bool:
        """Run an extraction callable, loading its result or storing its error"""
        try:
            raw = extract()
        except ExtractionError as e:
            self.fail_extraction(str(e))
            return False
        self.load_extraction(raw)
        return True

    def reset(self):
        self.state = get_default_state(self.settings)

    # ---------- Record edits ----------
    def _update_record(self, **changes):
        if self.state.record is None:
            return
        self.state.record = replace(self.state.record, **changes)
        self._recompute()

    def _entries(self, kind: str) -> List[Entry]:
        return getattr(self.state.record, kind)

    def set_gross_credit(self, value: float):
        self._update_record(gross_claimant_credit=max(0.0, float(value)))

    def add_entry(self, kind: str, description: str = "", amount: float = 0.0) -> Optional[str]:
        """Append a blank entry; new discounts start as deductible"""
        if self.state.record is None:
            return None
        entries = add_entry(self._entries(kind), description, amount)
        new = entries[-1].id
        if kind == DISCOUNTS:
            self.state.fee = replace(self.state.fee, deductible_ids=self.state.fee.deductible_ids | {new})
        self._update_record(**{kind: entries})
        return new

    def set_entry_description(self, kind: str, entry_id: str, description: str):
        if self.state.record is None:
            return
        self._update_record(**{kind: update_entry_description(self._entries(kind), entry_id, description)})

    def set_entry_amount(self, kind: str, entry_id: str, amount: float):
        if self.state.record is None:
            return
        self._update_record(**{kind: update_entry_amount(self._entries(kind), entry_id, amount)})

    def delete_entry(self, kind: str, entry_id: str):
        if self.state.record is None:
            return
        if kind == DISCOUNTS:
            self.state.fee = replace(self.state.fee, deductible_ids=self.state.fee.deductible_ids - {entry_id})
        self._update_record(**{kind: remove_entry(self._entries(kind), entry_id)})

    # ---------- Deposits ----------
    def add_deposit(self):
        self.state.deposits = add_deposit(self.state.deposits)
        self._reallocate()

    def set_deposit_amount(self, deposit_id: str, amount: float):
        self.state.deposits = update_deposit_amount(self.state.deposits, deposit_id, amount)
        self._reallocate()

    def delete_deposit(self, deposit_id: str):
        self.state.deposits = remove_deposit(self.state.deposits, deposit_id)
        self._reallocate()

    # ---------- Contractual fee ----------
    def set_fee_enabled(self, enabled: bool):
        self.state.fee = replace(self.state.fee, enabled=bool(enabled))
        self._recompute()

    def set_fee_percentage(self, percentage: float):
        self.state.fee = replace(self.state.fee, percentage=max(0.0, float(percentage)))
        self._recompute()

    def configure_fee(self, enabled: bool, percentage: float, deductible_ids):
        """Apply a whole fee configuration with a single recomputation"""
        self.state.fee = replace(
            self.state.fee,
            enabled=bool(enabled),
            percentage=max(0.0, float(percentage)),
            deductible_ids=set(deductible_ids),
        )
        self._recompute()

    def toggle_deductible_discount(self, discount_id: str):
        ids = self.state.fee.deductible_ids ^ {discount_id}
        self.state.fee = replace(self.state.fee, deductible_ids=ids)
        self._recompute()

    # ---------- Items ----------
    def find_item(self, item_id: str) -> Optional[AllocatableItem]:
        return next((i for i in self.state.items if i.id == item_id), None)

    def toggle_item(self, item_id: str):
        item = self.find_item(item_id)
        if item is None:
            return
        self.state.items = update_item_selected(self.state.items, item_id, not item.selected)
        self._reallocate()

    def rename_item(self, item_id: str, description: str):
        """Only the displayed label changes; results are kept"""
        if self.find_item(item_id) is None:
            return
        self.state.renamed = {**self.state.renamed, item_id: description}
        self.state.items = update_item_description(self.state.items, item_id, description)

    def override_paid(self, item_id: str, amount: float):
        item = self.find_item(item_id)
        if item is None:
            return
        self.state.result = override_paid(self.state.result, item, amount)

    # ---------- Fee sharing ----------
    def toggle_fee_share(self, item_id: str):
        self.state.fee_share_ids = self.state.fee_share_ids ^ {item_id}

    def set_number_of_lawyers(self, n: int):
        self.state.number_of_lawyers = max(1, int(n))

    def fee_share(self) -> Tuple[float, float]:
        st = self.state
        return compute_fee_share(st.result, st.fee_share_ids, st.number_of_lawyers)

    # ---------- Views ----------
    def set_hide_zero_paid(self, hide: bool):
        self.state.hide_zero_paid = bool(hide)

    def visible_items(self) -> List[AllocatableItem]:
        return visible_items(self.state.items, self.state.result, self.state.hide_zero_paid)

    def hidden_items(self) -> List[AllocatableItem]:
        """Items the zero-paid filter keeps out of the rateio list"""
        shown = {i.id for i in self.visible_items()}
        return [i for i in self.state.items if i.id not in shown]

    def summary(self) -> Dict[str, float]:
        return compute_summary(self.state.items, self.state.result, self.state.deposits)
