"""
User model.

Users are opaque to the engine. Storage implementations may use any object;
the alias documents the common mapping shape.
"""

from typing import Any, Dict

User = Dict[str, Any]
