"""
API server package — HTTP interface over the identity stores.

The acting address comes from the X-Caller-Address header; authorization is
enforced by the stores themselves.
"""
