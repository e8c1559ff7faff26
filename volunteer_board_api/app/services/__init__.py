"""
Service layer abstraction.

Each service encapsulates business logic for a collection and talks
to the JSON store through ``core.store.get_store``.  Services raise
the errors defined in ``core.errors``; the ``actions`` module turns
them into result objects.
"""
