"""
Main application window for the rateio GUI
"""
from __future__ import annotations
import logging
import queue
import threading
from typing import Optional

try:
    import tkinter as tk
    from tkinter import ttk, messagebox, filedialog
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None
    filedialog = None

from computations import net_claimant_credit, total_deposits
from config import Settings
from excel_export import export_rateio_excel
from extraction import COMMUNICATION_ERROR, ExtractionError, extract_from_image, read_image
from gui_dialogs import AmountDialog, EntryDialog, FeeSettingsDialog, TextDialog
from models import ORIGIN_CLAIMANT, ORIGIN_PRINCIPAL
from session import DEBITS, DISCOUNTS, RateioSession
from utils import format_currency

logger = logging.getLogger(__name__)

ORIGIN_TEXT = {ORIGIN_PRINCIPAL: "Principal", ORIGIN_CLAIMANT: "Reclamante"}


class RateioApp(ttk.Frame):
    """Main application window"""

    def __init__(self, master: tk.Tk, settings: Optional[Settings] = None):
        super().__init__(master, padding=8)
        self.master = master
        self.master.title("Rateio Trabalhista")
        self.master.geometry("1150x700")
        self.grid(row=0, column=0, sticky="nsew")
        self.master.rowconfigure(0, weight=1)
        self.master.columnconfigure(0, weight=1)

        self.settings = settings or Settings()
        self.session = RateioSession(self.settings)
        self._pending: "queue.Queue" = queue.Queue()
        self._busy = False

        self._build_menu()
        self._build_ui()
        self.refresh_all()

    # ---------- Menu ----------
    def _build_menu(self):
        menubar = tk.Menu(self.master)
        filem = tk.Menu(menubar, tearoff=0)
        filem.add_command(label="Abrir Imagem…", command=self.open_image)
        filem.add_command(label="Nova Análise", command=self.new_analysis)
        filem.add_separator()
        filem.add_command(label="Exportar Excel…", command=self.export_excel_dialog)
        filem.add_separator()
        filem.add_command(label="Sair", command=self.master.destroy)
        menubar.add_cascade(label="Arquivo", menu=filem)
        self.file_menu = filem

        viewm = tk.Menu(menubar, tearoff=0)
        self.hide_zero_var = tk.BooleanVar(value=self.session.state.hide_zero_paid)
        viewm.add_checkbutton(
            label="Ocultar itens sem pagamento",
            variable=self.hide_zero_var,
            command=self._toggle_hide_zero,
        )
        menubar.add_cascade(label="Exibir", menu=viewm)

        self.master.config(menu=menubar)

    def _toggle_hide_zero(self):
        self.session.set_hide_zero_paid(self.hide_zero_var.get())
        self.refresh_rateio()

    # ---------- UI ----------
    def _build_ui(self):
        nb = ttk.Notebook(self)
        nb.grid(row=0, column=0, sticky="nsew")
        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

        self.tab_sheet = ttk.Frame(nb, padding=8)
        self.tab_deposits = ttk.Frame(nb, padding=8)
        self.tab_rateio = ttk.Frame(nb, padding=8)
        nb.add(self.tab_sheet, text="Planilha")
        nb.add(self.tab_deposits, text="Depósitos")
        nb.add(self.tab_rateio, text="Rateio")

        self._build_sheet_tab()
        self._build_deposits_tab()
        self._build_rateio_tab()

    def _tree(self, parent, cols, widths, row, height=10):
        tree = ttk.Treeview(parent, columns=cols, show="headings", height=height)
        for c, w in zip(cols, widths):
            tree.heading(c, text=c)
            tree.column(c, width=w, anchor="w")
        tree.grid(row=row, column=0, sticky="nsew")
        yscroll = ttk.Scrollbar(parent, orient="vertical", command=tree.yview)
        tree.configure(yscroll=yscroll.set)
        yscroll.grid(row=row, column=1, sticky="ns")
        return tree

    def _build_sheet_tab(self):
        tab = self.tab_sheet
        tab.columnconfigure(0, weight=1)

        top = ttk.Frame(tab)
        top.grid(row=0, column=0, sticky="ew")
        self.open_btn = ttk.Button(top, text="Abrir Imagem…", command=self.open_image)
        self.open_btn.pack(side="left", padx=3)
        self.status_var = tk.StringVar(value="")
        ttk.Label(top, textvariable=self.status_var, foreground="#B00020").pack(side="left", padx=8)

        gross = ttk.Frame(tab)
        gross.grid(row=1, column=0, sticky="ew", pady=(8, 4))
        self.gross_var = tk.StringVar(value="")
        self.net_var = tk.StringVar(value="")
        ttk.Label(gross, textvariable=self.gross_var).pack(side="left")
        ttk.Button(gross, text="Editar", command=self.edit_gross_credit).pack(side="left", padx=6)
        ttk.Label(gross, textvariable=self.net_var).pack(side="left", padx=16)

        self.discount_tree = self._entry_section(tab, "Descontos do Reclamante", DISCOUNTS, 2)
        self.debit_tree = self._entry_section(tab, "Débitos da Reclamada", DEBITS, 4)

    def _entry_section(self, tab, title, kind, row):
        bar = ttk.Frame(tab)
        bar.grid(row=row, column=0, sticky="ew", pady=(8, 2))
        ttk.Label(bar, text=title, font=("TkDefaultFont", 10, "bold")).pack(side="left")
        ttk.Button(bar, text="Adicionar", command=lambda: self.add_entry(kind)).pack(side="left", padx=6)
        ttk.Button(bar, text="Editar", command=lambda: self.edit_entry(kind)).pack(side="left", padx=3)
        ttk.Button(bar, text="Excluir", command=lambda: self.delete_entry(kind)).pack(side="left", padx=3)
        tree = self._tree(tab, ("descrição", "valor"), [600, 160], row + 1, height=7)
        tab.rowconfigure(row + 1, weight=1)
        return tree

    def _build_deposits_tab(self):
        tab = self.tab_deposits
        tab.columnconfigure(0, weight=1)
        top = ttk.Frame(tab)
        top.grid(row=0, column=0, sticky="ew")
        ttk.Button(top, text="Adicionar", command=self.add_deposit).pack(side="left", padx=3)
        ttk.Button(top, text="Editar", command=self.edit_deposit).pack(side="left", padx=3)
        ttk.Button(top, text="Excluir", command=self.delete_deposit).pack(side="left", padx=3)
        self.deposit_total_var = tk.StringVar(value="")
        ttk.Label(top, textvariable=self.deposit_total_var).pack(side="left", padx=16)

        self.deposit_tree = self._tree(tab, ("#", "valor"), [60, 200], 1, height=14)
        tab.rowconfigure(1, weight=1)

    def _build_rateio_tab(self):
        tab = self.tab_rateio
        tab.columnconfigure(0, weight=1)

        top = ttk.Frame(tab)
        top.grid(row=0, column=0, sticky="ew")
        ttk.Button(top, text="Honorários Contratuais…", command=self.fee_settings_dialog).pack(side="left", padx=3)
        ttk.Button(top, text="Incluir/Excluir do Rateio", command=self.toggle_selected_item).pack(side="left", padx=3)
        ttk.Button(top, text="Renomear", command=self.rename_selected_item).pack(side="left", padx=3)
        ttk.Button(top, text="Editar Valor Pago", command=self.edit_paid).pack(side="left", padx=3)
        ttk.Button(top, text="Marcar Hon. Adv.", command=self.toggle_fee_share).pack(side="left", padx=3)
        self.hidden_var = tk.StringVar(value="")
        ttk.Label(top, textvariable=self.hidden_var, foreground="#7F6000").pack(side="left", padx=12)

        cols = ("rateio", "descrição", "origem", "valor original", "valor pago", "valor restante", "hon. adv.")
        self.item_tree = self._tree(tab, cols, [60, 380, 100, 130, 130, 130, 70], 1, height=16)
        tab.rowconfigure(1, weight=1)

        bottom = ttk.Frame(tab)
        bottom.grid(row=2, column=0, sticky="ew", pady=(8, 0))
        ttk.Label(bottom, text="Nº de advogados").pack(side="left")
        self.lawyers_var = tk.StringVar(value=str(self.session.state.number_of_lawyers))
        spin = ttk.Spinbox(bottom, from_=1, to=50, width=5, textvariable=self.lawyers_var,
                           command=self._lawyers_changed)
        spin.pack(side="left", padx=4)
        spin.bind("<FocusOut>", lambda e: self._lawyers_changed())
        self.fee_share_var = tk.StringVar(value="")
        ttk.Label(bottom, textvariable=self.fee_share_var).pack(side="left", padx=12)

        self.summary_var = tk.StringVar(value="")
        ttk.Label(tab, textvariable=self.summary_var, justify="left").grid(row=3, column=0, sticky="w", pady=(8, 0))

    # ---------- Extraction ----------
    def open_image(self):
        if self._busy:
            return
        fp = filedialog.askopenfilename(
            title="Abrir imagem da planilha",
            filetypes=[("Imagens", "*.jpg *.jpeg *.png *.webp"), ("Todos os arquivos", "*.*")]
        )
        if not fp:
            return
        try:
            image, mime = read_image(fp)
        except ExtractionError as ex:
            self.session.fail_extraction(str(ex))
            self.refresh_all()
            return

        self._set_busy(True)
        model = self.settings.gemini_model
        threading.Thread(target=self._extract_worker, args=(image, mime, model), daemon=True).start()
        self.after(100, self._poll_extraction)

    def _extract_worker(self, image: bytes, mime: str, model: str):
        try:
            self._pending.put(("ok", extract_from_image(image, mime, model=model)))
        except ExtractionError as ex:
            self._pending.put(("error", str(ex)))
        except Exception:
            logger.exception("Extraction worker failed")
            self._pending.put(("error", COMMUNICATION_ERROR))

    def _poll_extraction(self):
        try:
            status, payload = self._pending.get_nowait()
        except queue.Empty:
            self.after(100, self._poll_extraction)
            return
        if status == "ok":
            self.session.load_extraction(payload)
        else:
            self.session.fail_extraction(payload)
        self._set_busy(False)
        self.refresh_all()

    def _set_busy(self, busy: bool):
        self._busy = busy
        self.open_btn.configure(state="disabled" if busy else "normal")
        self.file_menu.entryconfigure(0, state="disabled" if busy else "normal")
        self.status_var.set("Analisando imagem…" if busy else "")
        self.master.configure(cursor="watch" if busy else "")

    def new_analysis(self):
        if messagebox.askyesno("Nova Análise", "Descartar os dados atuais e começar de novo?"):
            self.session.reset()
            self.hide_zero_var.set(self.session.state.hide_zero_paid)
            self.lawyers_var.set(str(self.session.state.number_of_lawyers))
            self.refresh_all()

    # ---------- Record edits ----------
    def _require_record(self) -> bool:
        if self.session.state.record is None:
            messagebox.showinfo("Planilha", "Abra a imagem de uma planilha primeiro.")
            return False
        return True

    def edit_gross_credit(self):
        if not self._require_record():
            return
        dlg = AmountDialog(self.master, "Crédito Bruto", "Crédito bruto do reclamante (R$)",
                           self.session.state.record.gross_claimant_credit)
        self.master.wait_window(dlg)
        if dlg.result is not None:
            self.session.set_gross_credit(dlg.result)
            self.refresh_all()

    def _entry_tree(self, kind):
        return self.discount_tree if kind == DISCOUNTS else self.debit_tree

    def add_entry(self, kind):
        if not self._require_record():
            return
        dlg = EntryDialog(self.master, "Adicionar")
        self.master.wait_window(dlg)
        if dlg.result:
            desc, amount = dlg.result
            self.session.add_entry(kind, desc, amount)
            self.refresh_all()

    def edit_entry(self, kind):
        sel = self._entry_tree(kind).selection()
        if not sel:
            messagebox.showinfo("Editar", "Selecione uma linha primeiro.")
            return
        entry = next((e for e in getattr(self.session.state.record, kind) if e.id == sel[0]), None)
        if entry is None:
            return
        dlg = EntryDialog(self.master, "Editar", entry)
        self.master.wait_window(dlg)
        if dlg.result:
            desc, amount = dlg.result
            self.session.set_entry_description(kind, entry.id, desc)
            self.session.set_entry_amount(kind, entry.id, amount)
            self.refresh_all()

    def delete_entry(self, kind):
        sel = self._entry_tree(kind).selection()
        if not sel:
            messagebox.showinfo("Excluir", "Selecione uma linha primeiro.")
            return
        if messagebox.askyesno("Excluir", "Excluir o lançamento selecionado?"):
            self.session.delete_entry(kind, sel[0])
            self.refresh_all()

    # ---------- Deposits ----------
    def add_deposit(self):
        self.session.add_deposit()
        self.refresh_all()

    def edit_deposit(self):
        sel = self.deposit_tree.selection()
        if not sel:
            messagebox.showinfo("Depósitos", "Selecione um depósito primeiro.")
            return
        dep = next((d for d in self.session.state.deposits if d.id == sel[0]), None)
        if dep is None:
            return
        dlg = AmountDialog(self.master, "Depósito", "Valor do depósito (R$)", dep.amount)
        self.master.wait_window(dlg)
        if dlg.result is not None:
            self.session.set_deposit_amount(dep.id, dlg.result)
            self.refresh_all()

    def delete_deposit(self):
        sel = self.deposit_tree.selection()
        if not sel:
            return
        self.session.delete_deposit(sel[0])
        self.refresh_all()

    # ---------- Rateio ----------
    def fee_settings_dialog(self):
        if not self._require_record():
            return
        dlg = FeeSettingsDialog(self.master, self.session)
        self.master.wait_window(dlg)
        if dlg.result:
            enabled, pct, ids = dlg.result
            self.session.configure_fee(enabled, pct, ids)
            self.refresh_rateio()

    def _selected_item_id(self) -> Optional[str]:
        sel = self.item_tree.selection()
        if not sel:
            messagebox.showinfo("Rateio", "Selecione um item primeiro.")
            return None
        return sel[0]

    def toggle_selected_item(self):
        item_id = self._selected_item_id()
        if item_id:
            self.session.toggle_item(item_id)
            self.refresh_rateio()

    def rename_selected_item(self):
        item_id = self._selected_item_id()
        if not item_id:
            return
        item = self.session.find_item(item_id)
        dlg = TextDialog(self.master, "Renomear", "Descrição", item.description)
        self.master.wait_window(dlg)
        if dlg.result:
            self.session.rename_item(item_id, dlg.result)
            self.refresh_rateio()

    def edit_paid(self):
        item_id = self._selected_item_id()
        if not item_id:
            return
        res = self.session.state.result.get(item_id)
        dlg = AmountDialog(self.master, "Valor Pago", "Valor pago (R$)", res.paid if res else 0.0)
        self.master.wait_window(dlg)
        if dlg.result is not None:
            self.session.override_paid(item_id, dlg.result)
            self.refresh_rateio()

    def toggle_fee_share(self):
        item_id = self._selected_item_id()
        if item_id:
            self.session.toggle_fee_share(item_id)
            self.refresh_rateio()

    def _lawyers_changed(self):
        try:
            n = int(self.lawyers_var.get())
        except ValueError:
            n = 1
        self.session.set_number_of_lawyers(n)
        self.lawyers_var.set(str(self.session.state.number_of_lawyers))
        self.refresh_rateio()

    # ---------- Export ----------
    def export_excel_dialog(self):
        if not self.session.state.items:
            messagebox.showinfo("Exportar", "Não há rateio para exportar.")
            return
        fp = filedialog.asksaveasfilename(
            title="Exportar Excel",
            defaultextension=".xlsx",
            filetypes=[("Pasta de trabalho do Excel", "*.xlsx")]
        )
        if not fp:
            return
        try:
            export_rateio_excel(self.session.state, fp)
            logger.info("Rateio exported to %s", fp)
            messagebox.showinfo("Exportar", f"Exportado: {fp}")
        except Exception as ex:
            logger.exception("Excel export failed")
            messagebox.showerror("Falha na exportação", str(ex))

    # ---------- Refresh ----------
    def refresh_all(self):
        self.refresh_sheet()
        self.refresh_deposits()
        self.refresh_rateio()

    @staticmethod
    def _clear(tree):
        for iid in tree.get_children():
            tree.delete(iid)

    def refresh_sheet(self):
        st = self.session.state
        self._clear(self.discount_tree)
        self._clear(self.debit_tree)
        if not self._busy:
            self.status_var.set(st.error or "")
        if st.record is None:
            self.gross_var.set("Crédito bruto: —")
            self.net_var.set("")
            return
        self.gross_var.set(f"Crédito bruto: R$ {format_currency(st.record.gross_claimant_credit)}")
        self.net_var.set(f"Crédito líquido: R$ {format_currency(net_claimant_credit(st.record))}")
        for e in st.record.discounts:
            self.discount_tree.insert("", "end", iid=e.id, values=(e.description, format_currency(e.amount)))
        for e in st.record.respondent_debits:
            self.debit_tree.insert("", "end", iid=e.id, values=(e.description, format_currency(e.amount)))

    def refresh_deposits(self):
        self._clear(self.deposit_tree)
        deposits = self.session.state.deposits
        for n, d in enumerate(deposits, start=1):
            self.deposit_tree.insert("", "end", iid=d.id, values=(n, format_currency(d.amount)))
        self.deposit_total_var.set(f"Total: R$ {format_currency(total_deposits(deposits))}")

    def refresh_rateio(self):
        st = self.session.state
        self._clear(self.item_tree)
        for item in self.session.visible_items():
            res = st.result.get(item.id)
            self.item_tree.insert("", "end", iid=item.id, values=(
                "sim" if item.selected else "não",
                item.description,
                ORIGIN_TEXT.get(item.origin, "Reclamada"),
                format_currency(item.face_value),
                format_currency(res.paid if res else 0.0),
                format_currency(res.remaining if res else item.face_value),
                "x" if item.id in st.fee_share_ids else "",
            ))

        hidden = self.session.hidden_items()
        if hidden:
            excluded = sum(1 for i in hidden if not i.selected)
            self.hidden_var.set(
                f"{len(hidden)} item(ns) oculto(s), {excluded} fora do rateio. "
                "Use Exibir > Ocultar itens sem pagamento para mostrar."
            )
        else:
            self.hidden_var.set("")

        total_fees, per_lawyer = self.session.fee_share()
        self.fee_share_var.set(
            f"Total de Hon. Adv.: R$ {format_currency(total_fees)}   "
            f"Por advogado: R$ {format_currency(per_lawyer)}"
        )
        s = self.session.summary()
        self.summary_var.set(
            f"Total a ratear: R$ {format_currency(s['to_allocate'])}\n"
            f"Total de depósitos: R$ {format_currency(s['deposits'])}\n"
            f"Total pago: R$ {format_currency(s['paid'])}\n"
            f"Total restante: R$ {format_currency(s['remaining'])}\n"
            f"Saldo final depósitos: R$ {format_currency(s['balance'])}"
        )
