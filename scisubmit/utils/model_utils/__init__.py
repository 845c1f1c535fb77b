"""
Thin data-access helpers per model. Services use these instead of issuing
ORM calls directly so every read and write is logged with the same context.
"""

from . import base  # re-export to make base helpers discoverable.
