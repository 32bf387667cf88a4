"""
Banking Services

Client, account and movement services with running balances and
account statements, served asynchronously over a document store.
"""

__version__ = "1.0.0"
