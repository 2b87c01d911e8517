"""
Services package for the BO7 scoreboard bot.

Ledger unit-of-work and the keep-alive HTTP listener.
"""

from .ledger_service import LedgerService
from .keepalive import KeepAliveServer

__all__ = ['LedgerService', 'KeepAliveServer']
