"""Search core: facet compilation, date windows, request building, result ordering.

Nothing in this package performs I/O. Requests are built here and handed to
icore.retrieval.search_gateway for execution.
"""
