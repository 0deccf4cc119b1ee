import sys

from factorygen.loaders import SourceLoader


def test_find_sources_maps_paths_to_modules(write_tree):
    root = write_tree(
        {
            "shop/__init__.py": "",
            "shop/drinks.py": "",
            "shop/sub/tea.py": "",
            "shop/__pycache__/drinks.py": "",
            "shop/.hidden/secret.py": "",
            "shop/not-a-module.py": "",
            "top.py": "",
        }
    )

    found = SourceLoader().find_sources([root])

    assert [name for name, _ in found] == ["shop", "shop.drinks", "shop.sub.tea", "top"]
    assert found[1][1] == root / "shop" / "drinks.py"


def test_first_root_wins_and_missing_roots_are_skipped(tmp_path, caplog):
    for name in ("a", "b"):
        (tmp_path / name).mkdir()
        (tmp_path / name / "mod.py").write_text("", encoding="utf-8")

    found = SourceLoader().find_sources([tmp_path / "a", tmp_path / "missing", tmp_path / "b"])

    assert found == [("mod", tmp_path / "a" / "mod.py")]
    assert "does not exist" in caplog.text


def test_autodiscover_imports_patterns(write_tree, monkeypatch):
    root = write_tree({"shop/__init__.py": "", "shop/drinks.py": "", "shop/meals.py": ""})
    monkeypatch.syspath_prepend(str(root))

    imported = SourceLoader().autodiscover(["shop.*", "shop.drinks", ""])

    assert imported == ["shop", "shop.drinks", "shop.meals"]
    assert "shop.meals" in sys.modules
