"""Core interfaces/abstractions.

Why:
- Defines contracts (Protocol) implemented by concrete adapters.
- The core depends on abstractions, so the session can be driven by a fake.
"""
