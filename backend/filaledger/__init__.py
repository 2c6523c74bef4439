"""
FilaLedger - filament spool inventory and print consumption ledger
"""
__version__ = "1.0.0"
