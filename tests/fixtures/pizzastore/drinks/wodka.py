from factorygen.decorators import factory
from pizzastore.drinks import Drink


@factory("Wodka", Drink)
class Wodka(Drink):
    def get_price(self) -> float:
        return 6.45

    def get_amount_in_ml(self) -> float:
        return 25.0
