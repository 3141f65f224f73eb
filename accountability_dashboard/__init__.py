"""
Accountability Reporting — Sector Delivery Dashboard

Aggregation and persistence backend for the yearly accountability report
("Relatório de Prestação de Contas"): sectors record deliveries against
strategic actions, and the package rolls them up into progress, rankings,
coverage and printable reports.

To swap the local JSON store for a database:
    Replace store.JsonStore with a class exposing the same read/write
    methods. EntryStore and ReportSession stay unchanged.

To connect to Streamlit:
    Open a ReportSession once per browser session and pass its entries,
    sectors and active actions to the dashboard functions, which return
    plain dicts and DataFrames.

To add a new sector colour:
    Add an entry to config.SECTOR_COLOR_PALETTE.
"""
