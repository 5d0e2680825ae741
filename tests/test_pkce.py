"""
Tests for PKCE helpers.
"""

import re

from oauth2_server.pkce import CHALLENGE_METHODS, generate_code_verifier, s256
from oauth2_server.util import url_safe_decode


class TestChallengeMethods:
    """Test the code challenge methods"""

    def test_only_s256_by_default(self):
        assert list(CHALLENGE_METHODS) == ["S256"]
        assert "plain" not in CHALLENGE_METHODS

    def test_s256_rfc7636_appendix_b(self):
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert s256(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"
        assert CHALLENGE_METHODS["S256"](verifier) == s256(verifier)


class TestGenerateCodeVerifier:
    """Test code verifier generation"""

    def test_format(self):
        verifier = generate_code_verifier()
        assert len(verifier) == 43
        assert re.fullmatch(r"[A-Za-z0-9_-]{43}", verifier)
        assert len(url_safe_decode(verifier)) == 32

    def test_random(self):
        assert generate_code_verifier() != generate_code_verifier()
