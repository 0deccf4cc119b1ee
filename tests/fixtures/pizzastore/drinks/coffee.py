from factorygen import factory

from .drink import Drink


@factory(identifier="Coffee", type=Drink)
class Coffee(Drink):
    def get_price(self) -> float:
        return 2.5

    def get_amount_in_ml(self) -> float:
        return 200.0
