"""
Service layer.

Services translate attachment operations into bucket lookups and
mutations against the store.  An attachment object holds only the
resource type, the resource key and a reference to the store; every
operation re‑reads or writes through a fresh transaction.
"""
