"""
Backup pipeline components.

This package contains everything between the remote Notion databases and
the files on disk:

Subpackages:
    extractors: Rate-limited cursor pagination against the Notion API
    transformers: Property flattening and table projection
    loaders: Raw JSON and TSV artifact writers

Modules:
    runner: Orchestrates fetch, project and write per collection

Architecture:
    1. Extract - Fetch every page of a collection (all-or-nothing)
    2. Write raw - Persist the records exactly as fetched
    3. Transform - Flatten properties into a header plus aligned rows
    4. Write table - Persist the rows as tab-separated text

Usage:
    from ingestion.extractors.notion_pager import NotionPager
    from ingestion.transformers.projector import TableProjector
    from ingestion.loaders.backup_writer import BackupWriter
    from ingestion.runner import BackupRunner

Example:
    pager = NotionPager(token="secret_...")
    writer = BackupWriter("data", logs_dir="logs")
    runner = BackupRunner(pager, writer)
    result = await runner.run([("users", "a1b2...")])

    print(f"Failed: {result['failed']}")
"""
