"""
EventLedger
Event registration and attendance ledger service
"""

__version__ = "1.0.0"
