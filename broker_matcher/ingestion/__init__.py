"""
Ingestion layer — loads the broker catalog from local files.

Submodules:
  catalog — JSON / CSV catalog loader with all-or-nothing validation
"""
