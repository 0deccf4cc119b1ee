from abc import ABC, abstractmethod


class Meal(ABC):
    @abstractmethod
    def get_price(self) -> float: ...

    def is_vegetarian(self) -> bool:
        return False
