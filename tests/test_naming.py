"""Unit tests for name normalization (go_scaffold.codegen.core.naming).

Tests cover:
- The three canonical forms from every input casing
- Idempotence of normalization on each derived form
- Word splitting on separators and case transitions
- Go keyword and builtin detection
"""

from __future__ import annotations

import pytest

from go_scaffold.codegen.core.naming import (
    NameForms,
    is_go_reserved,
    normalize,
    split_words,
)


# ---------------------------------------------------------------------------
# normalize
# ---------------------------------------------------------------------------


class TestNormalize:
    @pytest.mark.parametrize(
        "raw", ["user_name", "user-name", "userName", "UserName", "USER_NAME", "user name"]
    )
    def test_every_casing_gives_same_forms(self, raw):
        assert normalize(raw) == NameForms("user_name", "userName", "UserName")

    def test_single_word(self):
        forms = normalize("product")
        assert forms.snake == "product"
        assert forms.camel == "product"
        assert forms.pascal == "Product"

    def test_pascal_entity_name(self):
        forms = normalize("OrderItem")
        assert forms.snake == "order_item"
        assert forms.camel == "orderItem"
        assert forms.pascal == "OrderItem"

    def test_digits_stay_in_word(self):
        assert normalize("address2").snake == "address2"
        assert normalize("line2Text").snake == "line2_text"

    def test_empty_input(self):
        assert normalize("") == NameForms("", "", "")
        assert normalize("  __ ") == NameForms("", "", "")

    @pytest.mark.parametrize("raw", ["created_by_user", "HTTPStatus", "born_at", "x"])
    def test_idempotent_on_derived_forms(self, raw):
        forms = normalize(raw)
        assert normalize(forms.snake).snake == forms.snake
        assert normalize(forms.camel).camel == forms.camel
        assert normalize(forms.pascal).pascal == forms.pascal
        assert normalize(forms.snake) == forms


# ---------------------------------------------------------------------------
# split_words
# ---------------------------------------------------------------------------


class TestSplitWords:
    def test_mixed_separators(self):
        assert split_words("first-name_value") == ["first", "name", "value"]

    def test_case_transitions(self):
        assert split_words("createdAtUtc") == ["created", "at", "utc"]

    def test_symbols_act_as_separators(self):
        assert split_words("price($)") == ["price"]


# ---------------------------------------------------------------------------
# Reserved words
# ---------------------------------------------------------------------------


class TestReserved:
    @pytest.mark.parametrize("name", ["type", "func", "range", "string", "len"])
    def test_reserved(self, name):
        assert is_go_reserved(name)

    @pytest.mark.parametrize("name", ["name", "price", "typeName"])
    def test_not_reserved(self, name):
        assert not is_go_reserved(name)
