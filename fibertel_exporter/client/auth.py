"""
Authentication module for the Fibertel Station client
=====================================================

This module handles the station's double PBKDF2 login scheme.

The station hands out two salts per login attempt. The plaintext password is
first bound to ``salt``, the hex result is then bound to ``saltwebui``, and
the second hex string is what the login form carries as ``password``.

"""

import hashlib
import logging

from fibertel_exporter.models import LoginSalts

logger = logging.getLogger("fibertel-exporter")

PBKDF2_ITERATIONS = 1000
PBKDF2_KEY_BYTES = 16

# Reserved password value that makes the login endpoint answer with salts
SALT_REQUEST_MARKER = "seeksalthash"


def pbkdf2_hex(key: str, salt: str) -> str:
    """
    Run one PBKDF2-HMAC-SHA256 stage.

    Args:
        key: Secret to stretch
        salt: Salt issued by the station

    Returns:
        First 16 bytes of the derived key as 32 lowercase hex characters
    """
    derived = hashlib.pbkdf2_hmac(
        "sha256",
        key.encode("utf-8"),
        salt.encode("utf-8"),
        PBKDF2_ITERATIONS,
    )
    return derived[:PBKDF2_KEY_BYTES].hex()


def derive_login_password(password: str, salt: str, salt_webui: str) -> str:
    """
    Derive the value the station expects in the login form.

    Args:
        password: Plaintext password
        salt: Per-attempt salt
        salt_webui: Per-interface salt

    Returns:
        32 character hex token
    """
    return pbkdf2_hex(pbkdf2_hex(password, salt), salt_webui)


class StationAuthenticator:
    """Builds the login form payloads for one set of credentials."""

    def __init__(self, username: str, password: str):
        """
        Initialize station authenticator.

        Args:
            username: Login username
            password: Login password
        """
        self.username = username
        self.password = password

    def build_salt_request(self) -> dict[str, str]:
        """Build the form that asks the station for fresh salts."""
        return {
            "username": self.username,
            "password": SALT_REQUEST_MARKER,
            "logout": "true",
        }

    def compute_credentials(self, salts: LoginSalts) -> str:
        """Derive the login token for the given salts."""
        logger.debug("🔐 Deriving login token from station salts")
        return derive_login_password(self.password, salts.salt, salts.salt_webui)

    def build_login_request(self, salts: LoginSalts) -> dict[str, str]:
        """Build the login form with the derived token."""
        return {
            "username": self.username,
            "password": self.compute_credentials(salts),
        }
