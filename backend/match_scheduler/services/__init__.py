"""
Services Layer

Business logic that:
- Accepts domain inputs (IDs, sessions, etc.)
- Returns domain outputs (models, dicts, etc.)
- Does NOT depend on HTTP request/response objects
"""
