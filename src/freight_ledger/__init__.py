"""
Freight ledger - load financial computation and post-delivery adjustments.

Every money figure on a load (accessorials, grand total, driver pay,
dispatcher commission, factoring) is derived from its inputs by one
calculation cascade; delivered loads only change through reasoned,
audited adjustments.
"""

__version__ = "0.1.0"
