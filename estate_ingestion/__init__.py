"""
estate_ingestion -- spreadsheet import for the estate ledger.

Workbook sources -> sheet classifier -> row mapping -> row schemas ->
integrity check -> ImportResult -> merge into the canonical Database.
"""
