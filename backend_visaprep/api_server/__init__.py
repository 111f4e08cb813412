"""
API server package: HTTP interface for answer scoring and final evaluation.

Translates request bodies into pipeline inputs and pipeline outcomes into
status codes. Does not compute scores itself.
"""
