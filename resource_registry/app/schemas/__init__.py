"""
Pydantic schema definitions for API payloads and the data file.

Schemas validate and normalise untrusted input before it reaches the
store, and describe the shape of stored records.
"""
