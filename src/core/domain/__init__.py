"""Domain models and errors.

Why:
- Pure, strict data structures (Pydantic v2) live here.
- The domain knows nothing about HTTP, the CLI or Pillow: only plants.
"""
