"""Command-line tools for NoteMaster.

- ``python -m notemaster.cli.ingest`` -- ingest, search, list and delete
  documents against the configured stores.
"""
