import pytest

from factorygen.metadata import DeclarationKind, SourceMetadataProvider, TypeReference, UnevaluatedExpression

DRINK = "pizzastore.drinks.drink.Drink"
MEAL = "pizzastore.meals.meal.Meal"


@pytest.fixture
def provider(pizzastore_src):
    return SourceMetadataProvider.from_paths([pizzastore_src])


def test_discovers_annotated_classes_in_source_order(provider):
    names = [d.qualified_name for d in provider.iter_annotated()]

    assert names == [
        "pizzastore.drinks.coffee.Coffee",
        "pizzastore.drinks.wodka.Wodka",
        "pizzastore.meals.pizza.MargheritaPizza",
        "pizzastore.meals.pizza.CalzonePizza",
        "pizzastore.meals.tiramisu.Tiramisu",
        "pizzastore.wodka.Wodka",
    ]


def test_annotation_fields_are_indirect_references(provider):
    coffee = provider.get_declaration("pizzastore.drinks.coffee.Coffee")

    assert coffee.annotation.identifier == "Coffee"
    assert coffee.annotation.type == TypeReference("Drink", module="pizzastore.drinks.coffee")
    assert provider.resolve_reference(coffee.annotation.type) == DRINK


@pytest.mark.parametrize(
    "qualified_name",
    ["pizzastore.drinks.wodka.Wodka", "pizzastore.wodka.Wodka"],
)
def test_re_exported_interface_resolves_to_defining_module(provider, qualified_name):
    decl = provider.get_declaration(qualified_name)

    assert decl.interfaces == (DRINK,)
    assert provider.resolve_reference(decl.annotation.type) == DRINK


def test_protocols_are_interfaces(provider):
    drink = provider.get_declaration(DRINK)

    assert drink.kind is DeclarationKind.INTERFACE
    assert drink.interfaces == ("pizzastore.product.Product",)
    assert drink.superclass is None


def test_abstract_detection_follows_inheritance(provider):
    assert provider.get_declaration(MEAL).is_abstract
    assert provider.get_declaration("pizzastore.meals.pizza.Pizza").is_abstract
    assert not provider.get_declaration("pizzastore.meals.pizza.CalzonePizza").is_abstract


def test_superclass_chain(provider):
    calzone = provider.get_declaration("pizzastore.meals.pizza.CalzonePizza")
    pizza = provider.get_declaration(calzone.superclass)

    assert calzone.superclass == "pizzastore.meals.pizza.Pizza"
    assert pizza.superclass == MEAL
    assert provider.get_declaration(MEAL).superclass is None


def test_dataclass_constructor_with_defaults_is_default(provider):
    tiramisu = provider.get_declaration("pizzastore.meals.tiramisu.Tiramisu")

    assert tiramisu.constructors[0].is_default
    assert tiramisu.annotation.type == TypeReference("Meal", module="pizzastore.meals.tiramisu")


def test_locations_point_at_class_statement(provider):
    coffee = provider.get_declaration("pizzastore.drinks.coffee.Coffee")

    assert coffee.location.path.name == "coffee.py"
    assert coffee.location.line == 7


def test_kinds_visibility_and_constructors(write_tree):
    root = write_tree(
        {
            "shop/__init__.py": "",
            "shop/items.py": '''
                import enum
                from dataclasses import dataclass, field
                from typing import overload

                from factorygen import factory as marker


                class Base:
                    def __init__(self, name, size=1):
                        self.name = name


                @marker("inherited", "Base")
                class Inherited(Base):
                    pass


                @marker("own", "Base")
                class Own(Base):
                    @overload
                    def __init__(self, a: int) -> None: ...
                    def __init__(self, *args, flag=False):
                        super().__init__("own")


                @marker("fields", "Base")
                @dataclass
                class Fields(Base):
                    required: int
                    optional: list = field(default_factory=list)


                @marker("color", "Base")
                class Color(enum.Enum):
                    RED = 1


                @marker("fn", "Base")
                def make():
                    return Base("fn")


                class _Hidden:
                    @marker("nested", "Base")
                    class Nested(Base):
                        pass
            ''',
        }
    )
    provider = SourceMetadataProvider.from_paths([root])
    decls = {d.name.qualname: d for d in provider.iter_annotated()}

    assert decls["Inherited"].constructors[0].parameter_count == 1
    assert decls["Own"].constructors[0].is_default
    assert decls["Fields"].constructors[0].parameter_count == 1
    assert decls["Color"].kind is DeclarationKind.ENUM
    assert decls["make"].kind is DeclarationKind.FUNCTION
    assert not decls["_Hidden.Nested"].is_public
    assert decls["Own"].annotation.identifier == "own"


def test_non_literal_identifier_and_unknown_decorators(write_tree):
    root = write_tree(
        {
            "shop/items.py": '''
                from factorygen import factory
                from other import factory as not_ours

                NAME = "dynamic"

                class Base:
                    pass

                @factory(identifier=NAME, type=Base)
                class Dynamic(Base):
                    pass

                @not_ours("ignored", Base)
                class Ignored(Base):
                    pass
            ''',
        }
    )
    provider = SourceMetadataProvider.from_paths([root])
    decls = list(provider.iter_annotated())

    assert [d.simple_name for d in decls] == ["Dynamic"]
    assert decls[0].annotation.identifier == UnevaluatedExpression("NAME")


def test_all_non_interface_bases_are_kept_in_order(write_tree):
    root = write_tree(
        {
            "shop/meals.py": """
                from abc import ABC
                from typing import Protocol

                class Edible(Protocol):
                    pass

                class LoggingMixin:
                    pass

                class Meal(ABC):
                    pass

                class Pizza(LoggingMixin, Edible, Meal):
                    pass
            """,
        }
    )
    provider = SourceMetadataProvider.from_paths([root])
    pizza = provider.get_declaration("shop.meals.Pizza")

    assert pizza.interfaces == ("shop.meals.Edible",)
    assert pizza.bases == ("shop.meals.LoggingMixin", "shop.meals.Meal")
    assert pizza.superclass == "shop.meals.LoggingMixin"
    assert provider.get_declaration("shop.meals.Meal").bases == ()


def test_relative_and_star_imports(write_tree):
    root = write_tree(
        {
            "shop/__init__.py": "",
            "shop/base.py": """
                from typing import Protocol

                class Drink(Protocol):
                    pass
            """,
            "shop/sub/__init__.py": "from ..base import *\n",
            "shop/sub/tea.py": """
                import factorygen
                from . import Drink

                @factorygen.factory("Tea", Drink)
                class Tea(Drink):
                    pass
            """,
        }
    )
    provider = SourceMetadataProvider.from_paths([root])
    tea = provider.get_declaration("shop.sub.tea.Tea")

    assert tea.interfaces == ("shop.base.Drink",)
    assert provider.resolve_reference(tea.annotation.type) == "shop.base.Drink"


def test_syntax_errors_are_collected_and_skipped(write_tree, caplog):
    root = write_tree({"shop/broken.py": "class Broken(:\n", "shop/ok.py": "class Ok:\n    pass\n"})

    provider = SourceMetadataProvider.from_paths([root])

    assert [path.name for path, _ in provider.parse_errors] == ["broken.py"]
    assert provider.get_declaration("shop.ok.Ok") is not None
    assert "cannot parse" in caplog.text
