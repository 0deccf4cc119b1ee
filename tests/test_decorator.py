import logging

import pytest

from factorygen import factory
from factorygen.decorators import ANNOTATION_ATTR, FactoryDecorator, get_annotation
from factorygen.metadata import FactoryAnnotation, TypeReference


class Drink:
    pass


def test_pins_annotation_and_returns_class(caplog):
    caplog.set_level(logging.INFO, logger="factorygen")

    @factory(identifier="Coffee", type=Drink)
    class Coffee(Drink):
        pass

    assert get_annotation(Coffee) == FactoryAnnotation(identifier="Coffee", type=Drink)
    assert isinstance(Coffee(), Drink)
    assert "[FACTORY]" in caplog.text and "Coffee" in caplog.text


def test_positional_arguments():
    @factory("Tea", Drink)
    class Tea(Drink):
        pass

    assert get_annotation(Tea).identifier == "Tea"


def test_string_type_becomes_module_anchored_reference():
    @factory(identifier="Tea", type=" Drink ")
    class Tea(Drink):
        pass

    assert get_annotation(Tea).type == TypeReference("Drink", module=__name__)


def test_bare_use_is_rejected():
    with pytest.raises(TypeError):

        @factory
        class Tea(Drink):
            pass


def test_annotation_is_not_inherited():
    @factory(identifier="Coffee", type=Drink)
    class Coffee(Drink):
        pass

    class Espresso(Coffee):
        pass

    assert get_annotation(Espresso) is None
    assert hasattr(Espresso, ANNOTATION_ATTR)


def test_decorator_does_not_validate():
    @factory(identifier="", type=None)
    def not_a_class():
        return None

    assert get_annotation(not_a_class) == FactoryAnnotation(identifier="", type=None)


def test_custom_pin_hook():
    pinned = []

    class Recording(FactoryDecorator):
        def pin(self, obj, annotation):
            pinned.append((obj.__name__, annotation.identifier))
            super().pin(obj, annotation)

    @Recording()(identifier="Coffee", type=Drink)
    class Coffee(Drink):
        pass

    assert pinned == [("Coffee", "Coffee")]
