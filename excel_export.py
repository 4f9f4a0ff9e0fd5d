"""
Excel export of the rateio result
"""
from __future__ import annotations
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from computations import compute_fee_share, compute_summary
from models import RateioState

MONEY_FORMAT = "#,##0.00"

ORIGIN_LABELS = {
    "principal": "Reclamante (líquido)",
    "reclamante": "Desconto do reclamante",
    "reclamada": "Débito da reclamada",
}


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    thin = Side(style="thin", color="A0A0A0")
    for cell in ws[row]:
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill("solid", fgColor="1F4E78")
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = Border(left=thin, right=thin, top=thin, bottom=thin)


def _autosize_columns(ws, min_width=10, max_width=60):
    """Size columns to their longest value"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        longest = max((len(str(c.value)) for c in ws[letter] if c.value is not None), default=0)
        ws.column_dimensions[letter].width = max(min_width, min(max_width, longest + 2))


def _money_columns(ws, columns, first_row=2):
    for r in range(first_row, ws.max_row + 1):
        for c in columns:
            ws.cell(r, c).number_format = MONEY_FORMAT


def export_rateio_excel(state: RateioState, filepath: str) -> None:
    """
    Export the current rateio to an Excel file with sheets:
    - Rateio: one row per item, totals at the bottom
    - Depósitos
    - Resumo: totals and fee sharing
    """
    wb = Workbook()
    wb.remove(wb.active)

    # Items
    ws = wb.create_sheet("Rateio")
    ws.append(["Descrição", "Origem", "Selecionado", "Valor Original", "Valor Pago", "Valor Restante"])
    _style_header(ws)
    ws.freeze_panes = "A2"
    for item in state.items:
        res = state.result.get(item.id)
        paid = res.paid if res else 0.0
        remaining = res.remaining if res else item.face_value
        ws.append([
            item.description,
            ORIGIN_LABELS.get(item.origin, item.origin),
            "Sim" if item.selected else "Não",
            item.face_value,
            paid,
            remaining,
        ])
    if state.items:
        last = ws.max_row
        ws.append(["TOTAL", "", "", f"=SUM(D2:D{last})", f"=SUM(E2:E{last})", f"=SUM(F2:F{last})"])
        ws.cell(ws.max_row, 1).font = Font(bold=True)
    _money_columns(ws, (4, 5, 6))
    _autosize_columns(ws)

    # Deposits
    ws = wb.create_sheet("Depósitos")
    ws.append(["#", "Valor"])
    _style_header(ws)
    for n, d in enumerate(state.deposits, start=1):
        ws.append([n, d.amount])
    _money_columns(ws, (2,))
    _autosize_columns(ws)

    # Summary
    ws = wb.create_sheet("Resumo")
    ws.append(["Indicador", "Valor"])
    _style_header(ws)
    s = compute_summary(state.items, state.result, state.deposits)
    total_fees, per_lawyer = compute_fee_share(state.result, state.fee_share_ids, state.number_of_lawyers)
    rows = [
        ("Total a Ratear", s["to_allocate"]),
        ("Total de Depósitos", s["deposits"]),
        ("Total Pago", s["paid"]),
        ("Total da Dívida", s["debt"]),
        ("Total Restante", s["remaining"]),
        ("Saldo Final Depósitos", s["balance"]),
        ("Total de Hon. Adv.", total_fees),
        (f"Valor por Advogado ({max(1, state.number_of_lawyers)})", per_lawyer),
    ]
    for label, value in rows:
        ws.append([label, value])
    _money_columns(ws, (2,))
    _autosize_columns(ws)

    wb.save(filepath)
