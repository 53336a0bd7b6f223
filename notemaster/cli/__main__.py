"""Allow ``python -m notemaster.cli`` execution."""

from notemaster.cli.ingest import main

main()
