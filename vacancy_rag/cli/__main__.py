"""Allow ``python -m vacancy_rag.cli`` execution."""

from vacancy_rag.cli.ingest import main

main()
