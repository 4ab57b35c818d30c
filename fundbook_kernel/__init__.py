"""
Fundbook Kernel - financial computation core for nonprofit back offices.

Pure, in-memory building blocks:
- Typed records (accounts, postings, journal lines, statement rows)
- Strict Decimal parsing at the record boundary
- Typed, coded exceptions
- Structured JSON logging
"""

__version__ = "0.1.0"
