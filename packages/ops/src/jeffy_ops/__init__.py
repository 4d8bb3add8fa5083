"""
jeffy_ops — Back-office jobs for the Jeffy store.

Architecture:
  loaders/  — batched Supabase writes with a WriteResult summary
  jobs/     — one module per job (reorder scan, franchise financials,
              promo expiry, CSV exports, status report)
  cli.py    — the `jeffy` click command that runs them

Quick start:
    from jeffy_ops.jobs.reorders import scan_low_stock
    items, result = scan_low_stock(enqueue=True)

CLI:
    jeffy reorders scan --enqueue
    jeffy financials calculate --range month
    jeffy promos expire
    jeffy export orders --range month --out orders.csv
    jeffy status
"""

__version__ = "0.1.0"
