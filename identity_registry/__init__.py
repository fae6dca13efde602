"""
Identity Registry — authorization-gated identity ledgers keyed by Solana address.

Two store variants share a record table: an issuer-gated store where only the
issuer writes, and an open store where an operator manages identity records
and any caller may attach a profile to an existing subject.
"""

__version__ = "0.1.0"
