"""
Rateio Trabalhista GUI
- Read a labor-court settlement spreadsheet image with Gemini.
- Simulate the proportional distribution (rateio) of judicial deposits over debts and discounts.
- Export the rateio to Excel.

Run:
  python rateio_gui.py

Requires GEMINI_API_KEY in the environment or in a local .env file.
(Tkinter ships with most Python distributions; on some Linux you may need: sudo apt-get install python3-tk)
"""
from __future__ import annotations

try:
    import tkinter as tk
except ModuleNotFoundError:
    tk = None

from config import load_settings, setup_logging


def main():
    """Main entry point for the application"""
    if tk is None:
        raise RuntimeError(
            'tkinter is not available. Install it (e.g., on Ubuntu: sudo apt-get install python3-tk) '
            'and re-run to use the GUI.'
        )

    settings = load_settings()
    setup_logging(settings.log_level)

    from main_app import RateioApp

    root = tk.Tk()
    RateioApp(root, settings)
    root.mainloop()


if __name__ == "__main__":
    main()
