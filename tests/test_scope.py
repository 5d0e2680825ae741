"""
Tests for the scope value type.
"""

import pytest

from oauth2_server import InvalidScope, Scope
from oauth2_server.models import SCOPE, SCOPE_TOKEN


class TestScopeGrammar:
    """Test scope string validation"""

    @pytest.mark.parametrize("text", ["", "read", "read write", "a!#[]~ b:c/d"])
    def test_valid(self, text):
        assert SCOPE.match(text)
        Scope(text)

    @pytest.mark.parametrize("text", [" read", "read ", "read  write", 'a"b', "a\\b", "a\tb", "é"])
    def test_invalid(self, text):
        assert not SCOPE.match(text)
        with pytest.raises(InvalidScope) as exc_info:
            Scope(text)
        assert exc_info.value.message == "invalid scope"
        assert exc_info.value.status == 400

    def test_scope_token(self):
        assert SCOPE_TOKEN.findall("read write") == ["read", "write"]


class TestScope:
    """Test scope algebra"""

    def test_duplicates_removed(self):
        assert str(Scope("a b a c")) == "a b c"
        assert len(Scope("a b a c")) == 3

    def test_empty(self):
        assert str(Scope()) == ""
        assert Scope("") == Scope()
        assert len(Scope("")) == 0

    def test_from_scope_round_trips(self):
        scope = Scope("read write")
        copy = Scope.from_scope(scope)
        assert copy == scope
        assert copy is not scope
        assert str(Scope.from_scope(str(scope))) == "read write"

    def test_from_scope_copies(self):
        scope = Scope("a")
        copy = Scope.from_scope(scope)
        copy.add("b")
        assert str(scope) == "a"
        assert str(copy) == "a b"

    def test_union(self):
        result = Scope.union(Scope("a b c e"), Scope("b d e f"))
        assert str(result) == "a b c e d f"

    def test_union_accepts_strings(self):
        assert str(Scope.union("a b", "b c")) == "a b c"

    def test_intersection(self):
        a = Scope("a b c e")
        b = Scope("b d e f")
        assert str(Scope.intersection(a, b)) == "b e"
        assert str(a) == "a b c e"
        assert str(b) == "b d e f"

    def test_add_remove_invalidate_string(self):
        scope = Scope("a b")
        assert str(scope) == "a b"
        scope.add("c")
        assert str(scope) == "a b c"
        scope.remove("a c")
        assert str(scope) == "b"
        scope.clear()
        assert str(scope) == ""

    def test_add_invalid_string(self):
        with pytest.raises(InvalidScope):
            Scope("a").add("b  c")

    def test_has(self):
        scope = Scope("a b c")
        assert scope.has("a c")
        assert scope.has(Scope("c b a"))
        assert scope.has(Scope())
        assert not scope.has("d")
        assert not scope.has("a d")

    def test_equality_ignores_order(self):
        assert Scope("a b") == Scope("b a")
        assert Scope("a b").equals("b a")
        assert Scope("a b") != Scope("a")
        assert not Scope("a").equals("a b")

    def test_not_equal_to_string(self):
        assert Scope("a") != "a"

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(Scope("a"))

    def test_container_protocol(self):
        scope = Scope("write read")
        assert list(scope) == ["write", "read"]
        assert scope.tokens() == ["write", "read"]
        assert "read" in scope
        assert "admin" not in scope

    def test_to_json(self):
        assert Scope("read write").to_json() == "read write"

    def test_repr(self):
        assert repr(Scope("a b")) == "Scope('a b')"

    def test_subclass_constructors(self):
        class CustomScope(Scope):
            pass

        result = CustomScope.union("a", "b")
        assert isinstance(result, CustomScope)
        assert isinstance(CustomScope.from_scope(Scope("a")), CustomScope)
