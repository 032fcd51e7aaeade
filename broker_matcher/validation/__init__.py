"""
Catalog validation.

Modules:
  integrity — per-record schema + business-rule checks, duplicate detection,
              and the graded CatalogIntegrityReport.
"""
