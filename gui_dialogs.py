"""
Dialog windows for the rateio GUI
"""
from __future__ import annotations
from typing import Dict, Optional

try:
    import tkinter as tk
    from tkinter import ttk, messagebox
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None

from models import Entry
from session import RateioSession
from utils import format_currency, parse_currency, safe_float


class _Dialog(tk.Toplevel):
    """Modal dialog with OK/Cancel and Enter bound to OK"""

    def __init__(self, master, title: str):
        super().__init__(master)
        self.title(title)
        self.resizable(False, False)
        self.result = None
        self.frm = ttk.Frame(self, padding=10)
        self.frm.grid(row=0, column=0, sticky="nsew")
        self.bind("<Return>", self._on_enter)
        self.bind("<KP_Enter>", self._on_enter)

    def _on_enter(self, event=None):
        self._ok()
        return "break"

    def _buttons(self, row: int):
        btns = ttk.Frame(self.frm)
        btns.grid(row=row, column=0, columnspan=2, sticky="e", pady=(10, 0))
        ttk.Button(btns, text="OK", command=self._ok).grid(row=0, column=0, padx=4)
        ttk.Button(btns, text="Cancelar", command=self._cancel).grid(row=0, column=1, padx=4)
        self.grab_set()
        self.transient(self.master)

    def _ok(self):
        self.destroy()

    def _cancel(self):
        self.result = None
        self.destroy()


class EntryDialog(_Dialog):
    """Add/edit a discount or a debit; result is (description, amount)"""

    def __init__(self, master, title: str, entry: Optional[Entry] = None):
        super().__init__(master, title)
        self.v_desc = tk.StringVar(value=entry.description if entry else "")
        self.v_amount = tk.StringVar(value=format_currency(entry.amount if entry else 0.0))

        ttk.Label(self.frm, text="Descrição").grid(row=0, column=0, sticky="w")
        ttk.Entry(self.frm, textvariable=self.v_desc, width=40).grid(row=0, column=1, sticky="w")
        ttk.Label(self.frm, text="Valor (R$)").grid(row=1, column=0, sticky="w", pady=2)
        ttk.Entry(self.frm, textvariable=self.v_amount, width=18).grid(row=1, column=1, sticky="w")
        self._buttons(2)

    def _ok(self):
        desc = self.v_desc.get().strip()
        if not desc:
            messagebox.showerror("Descrição", "Informe a descrição.", parent=self)
            return
        self.result = (desc, parse_currency(self.v_amount.get()))
        self.destroy()


class AmountDialog(_Dialog):
    """Single currency value; result is a float"""

    def __init__(self, master, title: str, label: str, value: float = 0.0):
        super().__init__(master, title)
        self.v_amount = tk.StringVar(value=format_currency(value))
        ttk.Label(self.frm, text=label).grid(row=0, column=0, sticky="w")
        ttk.Entry(self.frm, textvariable=self.v_amount, width=18).grid(row=0, column=1, sticky="w")
        self._buttons(1)

    def _ok(self):
        self.result = parse_currency(self.v_amount.get())
        self.destroy()


class TextDialog(_Dialog):
    """Single text value; result is the stripped string"""

    def __init__(self, master, title: str, label: str, value: str = ""):
        super().__init__(master, title)
        self.v_text = tk.StringVar(value=value)
        ttk.Label(self.frm, text=label).grid(row=0, column=0, sticky="w")
        ttk.Entry(self.frm, textvariable=self.v_text, width=40).grid(row=0, column=1, sticky="w")
        self._buttons(1)

    def _ok(self):
        text = self.v_text.get().strip()
        if not text:
            return
        self.result = text
        self.destroy()


class FeeSettingsDialog(_Dialog):
    """
    Contractual fee configuration: on/off, percentage and which discounts
    are deducted from the gross credit before applying the percentage.
    Result is (enabled, percentage, deductible ids).
    """

    def __init__(self, master, session: RateioSession):
        super().__init__(master, "Honorários Contratuais")
        fee = session.state.fee
        discounts = session.state.record.discounts if session.state.record else []

        self.v_enabled = tk.BooleanVar(value=fee.enabled)
        self.v_pct = tk.StringVar(value=f"{fee.percentage:g}")
        self.v_discounts: Dict[str, tk.BooleanVar] = {}

        ttk.Checkbutton(self.frm, text="Calcular honorários contratuais", variable=self.v_enabled).grid(
            row=0, column=0, columnspan=2, sticky="w"
        )
        ttk.Label(self.frm, text="Percentual (%)").grid(row=1, column=0, sticky="w", pady=2)
        ttk.Entry(self.frm, textvariable=self.v_pct, width=8).grid(row=1, column=1, sticky="w")

        ttk.Label(self.frm, text="Descontos deduzidos da base de cálculo:").grid(
            row=2, column=0, columnspan=2, sticky="w", pady=(8, 2)
        )
        r = 3
        for d in discounts:
            v = tk.BooleanVar(value=d.id in fee.deductible_ids)
            self.v_discounts[d.id] = v
            ttk.Checkbutton(
                self.frm, text=f"{d.description}  (R$ {format_currency(d.amount)})", variable=v
            ).grid(row=r, column=0, columnspan=2, sticky="w")
            r += 1
        self._buttons(r)

    def _ok(self):
        pct = safe_float(self.v_pct.get().replace(",", "."), -1.0)
        if pct < 0:
            messagebox.showerror("Percentual", "Informe um percentual válido.", parent=self)
            return
        ids = {k for k, v in self.v_discounts.items() if v.get()}
        self.result = (bool(self.v_enabled.get()), pct, ids)
        self.destroy()
