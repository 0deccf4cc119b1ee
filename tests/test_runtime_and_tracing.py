import pytest

from factorygen.exceptions import FactoryGenError
from factorygen.runtime import UnknownIdentifierError
from factorygen.tracing import SpanPath, trace_span


def test_unknown_identifier_is_a_lookup_error_only():
    err = UnknownIdentifierError(None, "pizzastore.drinks.drink.Drink")

    assert isinstance(err, LookupError)
    assert not isinstance(err, FactoryGenError)
    assert err.identifier is None
    assert "None" in str(err)


def test_span_path():
    path = SpanPath.from_str("factorygen.emit").child("DrinkFactory", "")

    assert str(path) == "factorygen.emit.DrinkFactory"
    assert SpanPath.from_str("  ").parts == ()


def test_trace_span_propagates_errors():
    with pytest.raises(KeyError):
        with trace_span(SpanPath.from_str("factorygen.test"), attributes={"n": 1, "skip": None, "obj": object()}):
            raise KeyError("boom")
