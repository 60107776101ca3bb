"""
Moneytracker - personal expense tracking ledger

Expenses recorded against lists, categories and prepaid cards, with budget
progress and alerts. One persisted snapshot is shared between the writer
(the CLI / MoneyTracker façade) and a read-only widget consumer.

Fun fact: the five seed categories have been the same since the very first
version of the data format - their ids are literally 1111... to 5555...!
"""

from moneytracker.tracker import MoneyTracker

__version__ = "0.1.0"
__all__ = ["MoneyTracker", "__version__"]
