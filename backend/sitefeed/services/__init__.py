"""Services Layer — imperative shell around core/: fetch, validate, persist, trigger.

Invariants:
    - Services own IO (CMS calls, build hook calls, DB writes)
    - Validation and classification rules live in core/, never here
"""
