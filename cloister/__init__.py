"""
Cloister - sandboxed filesystem operations over an authenticated API.

Gates:
- TokenGate: bearer token verification
- FileSystemGate: authorization checks and filesystem dispatch
- Config: static configuration loaded at startup
"""

__version__ = "0.1.0"
