"""
Application engine and status lifecycle module.

Drives a transaction through its steps (one ApplicationSession per open
transaction) and enforces the forward-only draft → active → completed
status lifecycle, with cancellation reachable only from draft.
"""
