"""Unit tests for Token, TokenType, DynamicalState and TokenIdAllocator."""

import pytest

from petrisim.core.errors import ConfigurationError, InvariantViolationError
from petrisim.core.tokens import (
    CANCER_TYPES,
    DynamicalState,
    Token,
    TokenIdAllocator,
    TokenType,
)


class TestTokenType:
    """Tests for the closed type-tag set."""

    def test_cancer_types(self):
        assert TokenType.CANCER_A.is_cancer
        assert TokenType.CANCER_B.is_cancer
        assert not TokenType.NORMAL_A.is_cancer
        assert not TokenType.NORMAL_B.is_cancer
        assert CANCER_TYPES == {TokenType.CANCER_A, TokenType.CANCER_B}

    def test_parse_by_value_and_name(self):
        assert TokenType.parse("CancerA") is TokenType.CANCER_A
        assert TokenType.parse("cancer_a") is TokenType.CANCER_A
        assert TokenType.parse(TokenType.NORMAL_B) is TokenType.NORMAL_B

    def test_parse_unknown_raises(self):
        with pytest.raises(ConfigurationError):
            TokenType.parse("Stem")

    def test_parse_state(self):
        assert DynamicalState.parse("Dormant") is DynamicalState.DORMANT
        assert DynamicalState.parse("ACTIVE") is DynamicalState.ACTIVE
        with pytest.raises(ConfigurationError):
            DynamicalState.parse("Asleep")


class TestToken:
    """Tests for Token."""

    def test_defaults(self):
        token = Token(7, TokenType.NORMAL_A)
        assert token.token_id == 7
        assert token.type_tag is TokenType.NORMAL_A
        assert token.dynamical_state is DynamicalState.INACTIVE
        assert token.age_in_active == 0
        assert not token.is_cancer
        assert not token.is_active

    def test_type_tag_is_read_only(self):
        token = Token(1, TokenType.CANCER_A)
        with pytest.raises(AttributeError):
            token.type_tag = TokenType.NORMAL_A
        with pytest.raises(AttributeError):
            token.token_id = 2

    def test_state_is_mutable(self):
        token = Token(1, TokenType.NORMAL_B)
        token.dynamical_state = DynamicalState.ACTIVE
        token.age_in_active = 2
        assert token.is_active
        assert token.age_in_active == 2

    def test_negative_age_rejected(self):
        with pytest.raises(InvariantViolationError):
            Token(1, TokenType.NORMAL_A, DynamicalState.ACTIVE, age_in_active=-1)

    def test_copy_is_independent(self):
        token = Token(3, TokenType.CANCER_B, DynamicalState.ACTIVE, age_in_active=1)
        clone = token.copy()
        clone.age_in_active = 2

        assert clone.token_id == 3
        assert clone.type_tag is TokenType.CANCER_B
        assert token.age_in_active == 1


class TestTokenIdAllocator:
    """Tests for TokenIdAllocator."""

    def test_sequential_and_unique(self):
        ids = TokenIdAllocator()
        allocated = [ids.allocate() for _ in range(5)]
        assert allocated == [0, 1, 2, 3, 4]
        assert ids.next_id == 5

    def test_start_offset(self):
        ids = TokenIdAllocator(next_id=10)
        assert ids.allocate() == 10
