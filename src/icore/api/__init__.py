"""API layer: the boundary controllers call into.

Key rules:

1. One SearchService method per search mode, each returning a ResultSet
2. Input problems raise InvalidRequestError before any remote call
3. Not found is None, never an exception
4. Services are constructed once (see factory.build_services) and injected
"""
