"""
Offline recipe ingestion.

Responsibilities:
- Read raw recipe dumps (JSON arrays of records, or objects keyed by id).
- Map them onto the canonical Recipe record and clean the text fields.
- Persist the processed corpus locally for the recipe store to load.
"""
