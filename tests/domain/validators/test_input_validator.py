"""Tests for operand line validation."""

import pytest

from intmul.domain import OperandPair
from intmul.domain.validators import validate_operands, check_splittable, strip_newline
from intmul.exceptions import (
    EmptyInput, LengthMismatch, InvalidCharacter, InvalidDigit, OddLengthError,
    ValidationError
)


class TestValidateOperands:
    """Test validation of raw input lines."""

    def test_valid_pair(self):
        pair = validate_operands("1a2b\n", "3c4d\n")
        assert pair == OperandPair("1a2b", "3c4d")

    def test_without_newlines(self):
        assert validate_operands("f", "f") == OperandPair("f", "f")

    def test_case_preserved(self):
        pair = validate_operands("AbCd\n", "00Ff\n")
        assert pair.a == "AbCd"
        assert pair.b == "00Ff"

    def test_only_one_newline_stripped(self):
        with pytest.raises(InvalidCharacter):
            validate_operands("12\n\n", "345\n")

    @pytest.mark.parametrize('a,b', [("", "12"), ("12", ""), ("\n", "1\n"), ("", "")])
    def test_empty_input(self, a, b):
        with pytest.raises(EmptyInput) as exc_info:
            validate_operands(a, b)
        assert isinstance(exc_info.value, ValidationError)
        assert str(exc_info.value) == "no input given"

    def test_length_mismatch(self):
        with pytest.raises(LengthMismatch):
            validate_operands("ab", "a")

    def test_invalid_character(self):
        with pytest.raises(InvalidCharacter) as exc_info:
            validate_operands("g1", "1a")
        assert isinstance(exc_info.value.original_exception, InvalidDigit)

    def test_invalid_character_in_second_operand(self):
        with pytest.raises(InvalidCharacter):
            validate_operands("1a", "1z")

    def test_carriage_return_rejected(self):
        with pytest.raises(InvalidCharacter):
            validate_operands("1\r\n", "2\r\n")

    def test_empty_checked_before_length(self):
        with pytest.raises(EmptyInput):
            validate_operands("", "abc")


class TestStripNewline:
    def test_strip(self):
        assert strip_newline("ab\n") == "ab"
        assert strip_newline("ab") == "ab"
        assert strip_newline("\n") == ""


class TestCheckSplittable:
    """Test rejection of lengths that cannot be halved to one digit."""

    @pytest.mark.parametrize('length', [1, 2, 4, 8, 16, 1024])
    def test_powers_of_two(self, length):
        check_splittable(length)

    def test_odd_length(self):
        with pytest.raises(OddLengthError) as exc_info:
            check_splittable(3)
        assert str(exc_info.value) == "input is not even"

    def test_odd_after_split(self):
        with pytest.raises(OddLengthError) as exc_info:
            check_splittable(6)
        assert "odd length 3" in str(exc_info.value)


class TestOperandPair:
    """Test the operand pair value type."""

    def test_unequal_lengths_rejected(self):
        with pytest.raises(ValueError):
            OperandPair("12", "1")

    def test_split(self):
        (ah, al), (bh, bl) = OperandPair("1a2b", "3c4d").split()
        assert (ah, al, bh, bl) == ("1a", "2b", "3c", "4d")

    def test_len(self):
        assert len(OperandPair("abcd", "0123")) == 4
