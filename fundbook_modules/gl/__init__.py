"""General Ledger Module (``fundbook_modules.gl``): manual journal entries."""

from fundbook_modules.gl.service import JournalService

__all__ = ["JournalService"]
