"""
Proof Key for Code Exchange (PKCE) by OAuth public clients.

https://datatracker.ietf.org/doc/html/rfc7636
"""

import hashlib
import secrets
from typing import Callable, Dict

from .util.encoding import url_safe_encode

# Transforms a code verifier into a code challenge.
ChallengeMethod = Callable[[str], str]
ChallengeMethods = Dict[str, ChallengeMethod]


def s256(verifier: str) -> str:
    """BASE64URL-ENCODE(SHA256(ASCII(code_verifier)))"""
    return url_safe_encode(hashlib.sha256(verifier.encode('ascii')).digest())


# Clients SHOULD use PKCE code challenge methods that do not expose the
# verifier in the authorization request; S256 is currently the only one.
# https://datatracker.ietf.org/doc/html/draft-ietf-oauth-security-topics#section-2.1.1
CHALLENGE_METHODS: ChallengeMethods = {
    "S256": s256,
}


def generate_code_verifier() -> str:
    """
    Generates a random code verifier with 256 bits of entropy.

    A random 32-octet sequence is base64url encoded to produce a 43 octet URL
    safe string.
    https://datatracker.ietf.org/doc/html/rfc7636#section-7.1
    """
    return url_safe_encode(secrets.token_bytes(32))
