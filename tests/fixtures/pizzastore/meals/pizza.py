from factorygen import factory

from .meal import Meal


class Pizza(Meal):
    vegetarian = False

    def is_vegetarian(self) -> bool:
        return self.vegetarian


@factory("Margherita", Meal)
class MargheritaPizza(Pizza):
    vegetarian = True

    def get_price(self) -> float:
        return 6.0


@factory(identifier="Calzone", type=Meal)
class CalzonePizza(Pizza):
    def get_price(self) -> float:
        return 8.5
