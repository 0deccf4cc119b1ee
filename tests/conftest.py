import shutil
import sys
import textwrap
from pathlib import Path

import pytest

from factorygen.metadata import (
    Declaration,
    DeclarationKind,
    FactoryAnnotation,
    SimpleMetadataProvider,
    TypeReference,
)

FIXTURES = Path(__file__).parent / "fixtures"

# Top-level packages that tests import from temporary source roots.
_TEST_PACKAGES = ("pizzastore", "pizzastore_factories", "shop", "generated_shop", "custom_settings")


def _purge_modules() -> None:
    for name in list(sys.modules):
        if name.split(".")[0] in _TEST_PACKAGES:
            del sys.modules[name]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    monkeypatch.delenv("FACTORYGEN_CONFIG_MODULE", raising=False)
    _purge_modules()
    yield
    _purge_modules()


@pytest.fixture
def pizzastore_src(tmp_path) -> Path:
    """A writable copy of the sample package; returns the source root."""
    root = tmp_path / "src"
    shutil.copytree(FIXTURES / "pizzastore", root / "pizzastore")
    return root


@pytest.fixture
def pizzastore_importable(pizzastore_src, monkeypatch) -> Path:
    monkeypatch.syspath_prepend(str(pizzastore_src))
    return pizzastore_src


@pytest.fixture
def write_tree(tmp_path):
    """Write ``{relative path: source}`` under ``tmp_path / "src"`` and return the root."""

    def _write(files: dict[str, str]) -> Path:
        root = tmp_path / "src"
        for rel, text in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
        return root

    return _write


# ---------------------------------------------------------------------------
# In-memory declarations
# ---------------------------------------------------------------------------

DRINK = "shop.drinks.Drink"
MEAL = "shop.meals.Meal"


def _annotated(module, qualname, identifier, group, **kwargs) -> Declaration:
    return Declaration.create(
        module,
        qualname,
        annotation=FactoryAnnotation(identifier=identifier, type=TypeReference(group)),
        **kwargs,
    )


@pytest.fixture
def annotated():
    """Build an annotated :class:`Declaration`: ``annotated(module, qualname, identifier, group, **kw)``."""
    return _annotated


@pytest.fixture
def shop_provider() -> SimpleMetadataProvider:
    """Drink (interface) and Meal (class) groups without any members."""
    return SimpleMetadataProvider(
        [
            Declaration.create("shop.drinks", "Drink", kind=DeclarationKind.INTERFACE),
            Declaration.create("shop.meals", "Meal", abstract=True),
            Declaration.create("shop.meals", "Pizza", abstract=True, superclass=MEAL),
        ]
    )


@pytest.fixture
def coffee() -> Declaration:
    return _annotated("shop.drinks", "Coffee", "Coffee", DRINK, interfaces=(DRINK,))

