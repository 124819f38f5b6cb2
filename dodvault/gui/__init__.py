"""
gui — PyQt6 front-end for dodvault.

Public API
──────────
MainWindow            — top-level application window
viewmodels            — pure-Python state containers
pages                 — list and editor pages
"""

from dodvault.gui.main_window import MainWindow
from dodvault.gui import viewmodels

__all__ = ["MainWindow", "viewmodels"]
