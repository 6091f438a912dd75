"""Tests for Condition chains and the built-in operators."""
from __future__ import annotations

from decimal import Decimal

import pytest

from droplet.core.exceptions import InvalidComparisonError, UnknownOperatorError
from droplet.core.naming import CSharpNamingConvention, set_naming_convention
from droplet.core.runtime import (
    Condition,
    Context,
    Drop,
    ElseCondition,
    evaluate_condition,
    register_operator,
    unregister_operator,
)


class Car(Drop):
    """Equal to another Car with the same make and model, or to "Make Model"."""

    def __init__(self, make: str, model: str) -> None:
        self.make = make
        self.model = model

    def __str__(self) -> str:
        return f"{self.make} {self.model}"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Car):
            return other.make == self.make and other.model == self.model
        if isinstance(other, str):
            return other == str(self)
        return False

    __hash__ = None  # type: ignore[assignment]


# =============================================================================
# Helpers
# =============================================================================


def evaluates(left: str, op: str, right: str, context: Context | None = None) -> bool:
    return Condition(left, op, right).evaluate(context if context is not None else Context())


def assert_true(left: str, op: str, right: str, context: Context | None = None) -> None:
    assert evaluates(left, op, right, context) is True, f"{left} {op} {right}"


def assert_false(left: str, op: str, right: str, context: Context | None = None) -> None:
    assert evaluates(left, op, right, context) is False, f"{left} {op} {right}"


def context_with(**values) -> Context:
    context = Context()
    for key, value in values.items():
        context[key] = value
    return context


# =============================================================================
# Basic operators
# =============================================================================


class TestBasicConditions:
    def test_basic_condition(self) -> None:
        assert Condition("1", "==", "2").evaluate(None) is False
        assert Condition("1", "==", "1").evaluate(None) is True

    @pytest.mark.parametrize(
        "left,op,right",
        [
            ("1", "==", "1"),
            ("1", "!=", "2"),
            ("1", "<>", "2"),
            ("1", "<", "2"),
            ("2", ">", "1"),
            ("1", ">=", "1"),
            ("2", ">=", "1"),
            ("1", "<=", "2"),
            ("1", "<=", "1"),
        ],
    )
    def test_default_operators_evaluate_true(self, left: str, op: str, right: str) -> None:
        assert_true(left, op, right)

    @pytest.mark.parametrize(
        "left,op,right",
        [
            ("1", "==", "2"),
            ("1", "!=", "1"),
            ("1", "<>", "1"),
            ("1", "<", "0"),
            ("2", ">", "4"),
            ("1", ">=", "3"),
            ("2", ">=", "4"),
            ("1", "<=", "0"),
        ],
    )
    def test_default_operators_evaluate_false(self, left: str, op: str, right: str) -> None:
        assert_false(left, op, right)

    def test_condition_without_operator_tests_truthiness(self) -> None:
        context = context_with(zero=0, empty_string="", nothing=None, no=False)
        assert Condition("zero").evaluate(context) is True
        assert Condition("empty_string").evaluate(context) is True
        assert Condition("nothing").evaluate(context) is False
        assert Condition("no").evaluate(context) is False
        assert Condition("missing").evaluate(context) is False

    def test_else_condition_is_always_true(self) -> None:
        condition = ElseCondition()
        assert condition.is_else
        assert condition.evaluate() is True
        assert not Condition("1", "==", "1").is_else

    def test_attach_returns_attachment(self) -> None:
        condition = Condition("1", "==", "1")
        block = ["body"]
        assert condition.attach(block) is block
        assert condition.attachment is block


class TestEquality:
    def test_numeric_equality_across_types(self) -> None:
        context = context_with(dec=Decimal("5.00"), short=1)
        assert_true("5.00", "==", "5.0")
        assert_true("5.00", "==", "5")
        assert_true("dec", "==", "5", context)
        assert_true("short", "==", "1", context)

    def test_decimal_precision_is_respected(self) -> None:
        assert_false("'4.33'", "==", "4.333")
        assert_false("4.33", "==", "4.333")

    def test_nil_comparisons(self) -> None:
        assert_true("nil", "==", "null")
        assert_false("nil", "==", "0")
        assert_true("missing", "==", "nil")

    def test_string_to_bool_conversion(self) -> None:
        assert_true("true", "==", "'true'")
        assert_false("true", "==", "'yes'")

    def test_empty_and_blank(self) -> None:
        context = context_with(items=[], text="  ", name="bob")
        assert_true("items", "==", "empty", context)
        assert_true("text", "==", "blank", context)
        assert_false("name", "==", "empty", context)


class TestComparisons:
    def test_less_than_decimal(self) -> None:
        context = context_with(model={"value": Decimal("-10.5")})
        assert_true("model.value", "<", "0", context)

    def test_comparison_with_nil_is_false(self) -> None:
        assert_false("missing", "<", "1")
        assert_false("1", ">", "missing")

    def test_incomparable_values_raise(self) -> None:
        context = context_with(items=[1, 2])
        with pytest.raises(InvalidComparisonError) as exc:
            evaluates("items", "<", "1", context)
        assert "Comparison of list with int failed" in str(exc.value)

    def test_unconvertible_string_raises(self) -> None:
        with pytest.raises(InvalidComparisonError):
            evaluates("1", "<", "'abc'")

    def test_nan_ordering_raises_invalid_comparison(self) -> None:
        context = context_with(x=float("nan"))
        with pytest.raises(InvalidComparisonError):
            evaluates("x", "<", "1", context)
        with pytest.raises(InvalidComparisonError):
            evaluates("1", ">=", "x", context)

    def test_nan_is_not_equal_to_numbers(self) -> None:
        context = context_with(x=float("nan"))
        assert_false("x", "==", "1", context)


# =============================================================================
# contains / startsWith / endsWith / hasKey / hasValue
# =============================================================================


class TestContains:
    @pytest.mark.parametrize("needle", ["'o'", "'b'", "'bo'", "'ob'", "'bob'"])
    def test_contains_works_on_strings(self, needle: str) -> None:
        assert_true("'bob'", "contains", needle)

    @pytest.mark.parametrize("needle", ["'bob2'", "'a'", "'---'"])
    def test_contains_is_false_for_missing_substring(self, needle: str) -> None:
        assert_false("'bob'", "contains", needle)

    def test_contains_works_on_arrays(self) -> None:
        context = context_with(array=[1, 2, 3, 4, 5])
        assert_false("array", "contains", "0", context)
        for n in ("1", "2", "3", "4", "5"):
            assert_true("array", "contains", n, context)
        assert_false("array", "contains", "6", context)
        assert_false("array", "contains", "'1'", context)

    def test_string_arrays(self) -> None:
        array = ["Apple", "Orange", None, "Banana"]
        context = context_with(array=array, first=array[0], last=array[-1])
        assert_true("array", "contains", "'Apple'", context)
        assert_true("array", "startsWith", "first", context)
        assert_false("array", "contains", "'apple'", context)
        assert_false("array", "contains", "'Mango'", context)
        assert_true("array", "contains", "'Orange'", context)
        assert_true("array", "contains", "'Banana'", context)
        assert_true("array", "endsWith", "last", context)
        assert_false("array", "contains", "'Orang'", context)

    def test_class_arrays(self) -> None:
        array = [Car("Honda", "Accord"), Car("Ford", "Explorer")]
        context = context_with(
            array=array,
            first=array[0],
            last=array[-1],
            clone=Car("Honda", "Accord"),
            camry=Car("Toyota", "Camry"),
        )
        assert_true("array", "contains", "first", context)
        assert_true("array", "startsWith", "first", context)
        assert_true("array", "contains", "clone", context)
        assert_true("array", "startsWith", "clone", context)
        assert_true("array", "endsWith", "last", context)
        assert_false("array", "contains", "camry", context)

    def test_value_type_equal_to_its_string_form(self) -> None:
        car = Car("Honda", "Accord")
        context = context_with(car=car, array=[car, Car("Ford", "Explorer")])
        assert_true("car", "==", "'Honda Accord'", context)
        assert_true("'Honda Accord'", "==", "car", context)
        assert_false("car", "==", "'Ford Explorer'", context)
        assert_true("array", "contains", "'Honda Accord'", context)
        assert_false("array", "contains", "'Toyota Camry'", context)

    def test_truthy_array(self) -> None:
        context = context_with(array=[True], first=True)
        assert_true("array", "contains", "first", context)
        assert_true("array", "startsWith", "first", context)
        assert_true("array", "startsWith", "'true'", context)
        assert_false("array", "contains", "'true'", context)

    def test_contains_works_on_double_arrays(self) -> None:
        context = context_with(array=[1.0, 2.1, 3.25, 4.333, 5.0])
        assert_true("array", "contains", "1.0", context)
        assert_false("array", "contains", "0", context)
        assert_true("array", "contains", "2.1", context)
        assert_false("array", "contains", "3", context)
        assert_false("array", "contains", "4.33", context)
        assert_true("array", "contains", "5.00", context)
        assert_false("array", "contains", "6", context)
        assert_false("array", "contains", "'1'", context)

    def test_contains_returns_false_for_nil_commands(self) -> None:
        assert_false("not_assigned", "contains", "0")
        assert_false("0", "contains", "not_assigned")

    def test_string_contains_numeric_needle(self) -> None:
        context = context_with(code="a1", year="2024-05")
        assert_true("code", "contains", "1", context)
        assert_true("year", "contains", "2024", context)
        assert_false("code", "contains", "2", context)
        assert_false("'true'", "contains", "true")

    def test_contains_on_mapping_checks_keys(self) -> None:
        context = context_with(hash={"a": 1})
        assert_true("hash", "contains", "'a'", context)
        assert_false("hash", "contains", "'b'", context)


class TestStartsAndEndsWith:
    @pytest.mark.parametrize("prefix", ["'d'", "'da'", "'dav'", "'dave'"])
    def test_starts_with_works_on_strings(self, prefix: str) -> None:
        assert_true("'dave'", "startswith", prefix)

    @pytest.mark.parametrize("prefix", ["'ave'", "'e'", "'---'"])
    def test_starts_with_false_on_strings(self, prefix: str) -> None:
        assert_false("'dave'", "startswith", prefix)

    def test_starts_with_works_on_arrays(self) -> None:
        context = context_with(array=[1, 2, 3, 4, 5])
        assert_false("array", "startswith", "0", context)
        assert_true("array", "startswith", "1", context)

    def test_starts_with_returns_false_for_nil_commands(self) -> None:
        assert_false("not_assigned", "startswith", "0")
        assert_false("0", "startswith", "not_assigned")

    @pytest.mark.parametrize("suffix", ["'e'", "'ve'", "'ave'", "'dave'"])
    def test_ends_with_works_on_strings(self, suffix: str) -> None:
        assert_true("'dave'", "endswith", suffix)

    @pytest.mark.parametrize("suffix", ["'dav'", "'d'", "'---'"])
    def test_ends_with_false_on_strings(self, suffix: str) -> None:
        assert_false("'dave'", "endswith", suffix)

    def test_ends_with_works_on_arrays(self) -> None:
        context = context_with(array=[1, 2, 3, 4, 5])
        assert_false("array", "endswith", "0", context)
        assert_true("array", "endswith", "5", context)

    def test_ends_with_returns_false_for_nil_commands(self) -> None:
        assert_false("not_assigned", "endswith", "0")
        assert_false("0", "endswith", "not_assigned")

    def test_empty_array_neither_starts_nor_ends(self) -> None:
        context = context_with(array=[])
        assert_false("array", "startswith", "1", context)
        assert_false("array", "endswith", "1", context)


class TestDictionaryOperators:
    @pytest.fixture
    def context(self) -> Context:
        return context_with(dictionary={"dave": "0", "bob": "4"})

    def test_dictionary_has_key(self, context: Context) -> None:
        assert_true("dictionary", "haskey", "'bob'", context)
        assert_false("dictionary", "haskey", "'0'", context)

    def test_dictionary_has_value(self, context: Context) -> None:
        assert_true("dictionary", "hasvalue", "'0'", context)
        assert_false("dictionary", "hasvalue", "'bob'", context)

    def test_undefined_right_operand_is_false(self, context: Context) -> None:
        assert_false("dictionary", "haskey", "not_assigned", context)
        assert_false("dictionary", "hasvalue", "not_assigned", context)
        assert_false("not_assigned", "haskey", "'bob'", context)
        assert_false("not_assigned", "hasvalue", "'0'", context)

    def test_non_mapping_has_no_keys(self) -> None:
        context = context_with(array=["bob"])
        assert_false("array", "haskey", "'bob'", context)
        assert_false("array", "hasvalue", "'bob'", context)


# =============================================================================
# Chains
# =============================================================================


class TestChains:
    def test_or_condition(self) -> None:
        condition = Condition("1", "==", "2")
        assert condition.evaluate(None) is False

        condition.or_(Condition("2", "==", "1"))
        assert condition.evaluate(None) is False

        condition.or_(Condition("1", "==", "1"))
        assert condition.evaluate(None) is True

    def test_and_condition(self) -> None:
        condition = Condition("1", "==", "1")
        assert condition.evaluate(None) is True

        condition.and_(Condition("2", "==", "2"))
        assert condition.evaluate(None) is True

        condition.and_(Condition("2", "==", "1"))
        assert condition.evaluate(None) is False

    def test_chain_folds_left_to_right(self) -> None:
        # (true or false) and false -> false; precedence would give true
        root = Condition("1", "==", "1")
        root.or_(Condition("1", "==", "2")).and_(Condition("1", "==", "2"))
        assert [node.left for _, node in root.chain()] == ["1", "1", "1"]
        assert root.evaluate() is False

    def test_every_node_is_evaluated(self) -> None:
        root = Condition("1", "==", "1")
        root.or_(Condition("1", "bogus", "1"))
        with pytest.raises(UnknownOperatorError) as exc:
            root.evaluate()
        assert exc.value.token == "bogus"

    def test_evaluate_condition_entry_point(self) -> None:
        context = context_with(name="bob")
        assert evaluate_condition(Condition("name", "==", "'bob'"), context) is True
        assert evaluate_condition(Condition("name", "==", "'bob'")) is False


# =============================================================================
# Operator registry
# =============================================================================


def is_multiple_of(left, right) -> bool:
    return left % right == 0


class TestOperatorRegistry:
    def test_unknown_operator_raises_with_exact_token(self) -> None:
        with pytest.raises(UnknownOperatorError) as exc:
            evaluates("1", "nope", "1")
        assert str(exc.value) == "Unknown operator nope"
        assert exc.value.token == "nope"

    def test_should_allow_custom_proc_operator(self) -> None:
        register_operator("starts_with", lambda left, right: str(left).startswith(str(right)))
        assert_true("'bob'", "starts_with", "'b'")
        assert_false("'bob'", "starts_with", "'o'")
        unregister_operator("starts_with")
        # built-in startsWith still answers to the snake_case spelling
        assert_true("'bob'", "starts_with", "'b'")

    def test_capital_in_custom_operator(self) -> None:
        register_operator("IsMultipleOf", is_multiple_of)

        assert_true("16", "IsMultipleOf", "4")
        assert_false("16", "IsMultipleOf", "5")

        assert_true("16", "ismultipleof", "4")
        assert_false("16", "ismultipleof", "5")

        assert_true("16", "is_multiple_of", "4")
        assert_false("16", "is_multiple_of", "5")

        with pytest.raises(UnknownOperatorError) as exc:
            evaluates("16", "isMultipleOf", "4")
        assert str(exc.value) == "Unknown operator isMultipleOf"

    def test_capital_in_custom_csharp_operator(self) -> None:
        set_naming_convention(CSharpNamingConvention())
        register_operator("DivisibleBy", is_multiple_of)

        assert_true("16", "DivisibleBy", "4")
        assert_false("16", "DivisibleBy", "5")

        assert_true("16", "divisibleby", "4")
        assert_false("16", "divisibleby", "5")

        with pytest.raises(UnknownOperatorError) as exc:
            evaluates("16", "divisibleBy", "4")
        assert exc.value.token == "divisibleBy"

    def test_custom_capitalized_operator(self) -> None:
        register_operator("StartsWith", lambda left, right: str(left).startswith(str(right)))
        assert_true("'bob'", "StartsWith", "'b'")
        assert_false("'bob'", "StartsWith", "'o'")

    def test_unregister_returns_predicate(self) -> None:
        register_operator("IsMultipleOf", is_multiple_of)
        assert unregister_operator("IsMultipleOf") is is_multiple_of
        assert unregister_operator("IsMultipleOf") is None
        with pytest.raises(UnknownOperatorError):
            evaluates("16", "IsMultipleOf", "4")

    def test_empty_operator_name_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            register_operator("", is_multiple_of)

    def test_unknown_operator_is_reported_at_evaluation(self) -> None:
        condition = Condition("1", "later", "1")
        register_operator("later", lambda left, right: True)
        assert condition.evaluate() is True


class TestNamingConventionSpellings:
    def test_ruby_lower_case_accepted(self) -> None:
        assert_false("'bob'", "startswith", "'B'")
        assert_true("'Bob'", "startswith", "'B'")

    def test_ruby_snake_case_accepted(self) -> None:
        assert_false("'bob'", "starts_with", "'B'")
        assert_true("'Bob'", "starts_with", "'B'")

    def test_ruby_pascal_case_not_accepted(self) -> None:
        with pytest.raises(UnknownOperatorError) as exc:
            evaluates("'bob'", "StartsWith", "'B'")
        assert str(exc.value) == "Unknown operator StartsWith"

    def test_csharp_lower_case_accepted(self) -> None:
        context = Context(naming_convention=CSharpNamingConvention())
        assert_true("'Bob'", "startswith", "'B'", context)

    def test_csharp_pascal_case_accepted(self) -> None:
        context = Context(naming_convention=CSharpNamingConvention())
        assert_false("'bob'", "StartsWith", "'B'", context)
        assert_true("'Bob'", "StartsWith", "'B'", context)

    def test_csharp_lower_pascal_case_accepted(self) -> None:
        context = Context(naming_convention=CSharpNamingConvention())
        assert_true("'Bob'", "startsWith", "'B'", context)

    def test_csharp_snake_case_not_accepted(self) -> None:
        context = Context(naming_convention=CSharpNamingConvention())
        with pytest.raises(UnknownOperatorError):
            evaluates("'Bob'", "starts_with", "'B'", context)

    def test_context_keeps_convention_after_global_swap(self) -> None:
        context = Context()
        set_naming_convention(CSharpNamingConvention())
        assert_true("'Bob'", "starts_with", "'B'", context)
