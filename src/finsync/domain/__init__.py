"""Domain layer for finsync.

Services live in their own modules (``finance``, ``statement_import``,
``sync_queue``) and are imported from there; they depend on the store and
remote layers, which in turn import the entities defined here.
"""
