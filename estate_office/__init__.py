"""
Estate Office - Source Package

Back-office library for a real-estate agency: property, lead and contact
CRM, deal pipeline tracking, buyer-requirement matching and a set of
accounting reports derived from journal entries.

DESIGN PRINCIPLES:
1. Every record lives under a named storage key as a JSON array
2. Reports are pure aggregations over stored records
3. No silent corrections - validation reports, humans fix
4. Every state transition is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Estate Office Team"
