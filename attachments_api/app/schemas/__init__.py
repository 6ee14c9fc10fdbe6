"""
Pydantic schema definitions for API payloads and stored records.

The same models describe the JSON sent over the wire and the JSON
records kept in the bucket store, so a stored rating or comment can be
returned to clients without conversion.
"""
