"""
Widget - read-only consumer of the shared snapshot
"""

from moneytracker.widget.models import CardSnapshot, CategorySnapshot, WidgetEntry
from moneytracker.widget.projections import build_widget_entry

__all__ = ["WidgetEntry", "CategorySnapshot", "CardSnapshot", "build_widget_entry"]
