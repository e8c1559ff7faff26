"""
Pydantic schema definitions.

Each collection (users, reports, notifications) defines its own
models.  The same models are the codec for the on‑disk JSON records:
field aliases give the camelCase keys used in the files and typed
fields (``datetime``) declare which values are timestamps.
"""
