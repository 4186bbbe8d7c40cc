"""
Station client package.

- auth.py: double PBKDF2 password derivation and login payloads
- http.py: transport primitive and CSRF token handling
- parser.py: JSON envelope parsing
- diagnostics.py: DOCSIS channel table retrieval
- main.py: FibertelStationClient session
"""

from .auth import derive_login_password
from .diagnostics import DiagnosticsFetcher
from .main import FibertelStationClient

__all__ = ["DiagnosticsFetcher", "FibertelStationClient", "derive_login_password"]
