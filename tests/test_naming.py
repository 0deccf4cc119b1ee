import pytest

from factorygen.naming import QualifiedName, is_dotted_identifier, is_public_path, simple_name, snake_case


@pytest.mark.parametrize(
    "name, expected",
    [("Drink", "drink"), ("HotDrink", "hot_drink"), ("HTTPClient", "http_client"), ("Meal2Go", "meal2_go")],
)
def test_snake_case(name, expected):
    assert snake_case(name) == expected


def test_public_paths():
    assert is_public_path("Outer.Inner")
    assert not is_public_path("_Outer.Inner")
    assert not is_public_path("Outer._Inner")


def test_dotted_identifiers():
    assert is_dotted_identifier("pizzastore.drinks")
    assert not is_dotted_identifier("pizzastore.class")
    assert not is_dotted_identifier("pizza-store")


def test_qualified_name_parts():
    name = QualifiedName("pizzastore.drinks.drink", "Outer.Drink")

    assert name.as_str == "pizzastore.drinks.drink.Outer.Drink"
    assert name.simple_name == "Drink"
    assert name.top_level == "Outer"
    assert name.package == "pizzastore.drinks"
    assert simple_name(name.as_str) == "Drink"


def test_qualified_name_validation():
    with pytest.raises(ValueError):
        QualifiedName("", "Drink")
    with pytest.raises(ValueError):
        QualifiedName("pizzastore", "not valid")


def test_try_of_rejects_local_classes():
    class Local:
        pass

    assert QualifiedName.try_of(Local) is None
    assert QualifiedName.try_of(QualifiedName) == QualifiedName("factorygen.naming", "QualifiedName")
