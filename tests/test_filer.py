import pytest

from factorygen.exceptions import ArtifactWriteError
from factorygen.processing import SourceFiler


def test_write_creates_packages_dirs_and_file(tmp_path):
    filer = SourceFiler(tmp_path)

    path = filer.write("pkg.sub.drink_factory", "X = 1\n")

    assert path == tmp_path / "pkg" / "sub" / "drink_factory.py"
    assert path.read_text(encoding="utf-8") == "X = 1\n"
    assert filer.written == {"pkg.sub.drink_factory": path}
    assert [p.name for p in path.parent.iterdir()] == ["drink_factory.py"]


def test_duplicate_write_is_refused_until_reset(tmp_path):
    filer = SourceFiler(tmp_path)
    filer.write("drink_factory", "A = 1\n")

    with pytest.raises(ArtifactWriteError) as exc_info:
        filer.write("drink_factory", "A = 2\n")
    assert exc_info.value.declaration is None
    assert (tmp_path / "drink_factory.py").read_text(encoding="utf-8") == "A = 1\n"

    filer.reset()
    filer.write("drink_factory", "A = 2\n")
    assert (tmp_path / "drink_factory.py").read_text(encoding="utf-8") == "A = 2\n"


def test_os_failure_becomes_artifact_write_error(tmp_path):
    blocker = tmp_path / "pkg"
    blocker.write_text("not a directory", encoding="utf-8")
    filer = SourceFiler(tmp_path)

    with pytest.raises(ArtifactWriteError) as exc_info:
        filer.write("pkg.drink_factory", "X = 1\n")

    assert exc_info.value.code == "ArtifactWriteFailure"
    assert isinstance(exc_info.value.__cause__, OSError)
    assert filer.written == {}


@pytest.mark.parametrize("name", ["", "pkg..mod", "class.factory", "1st"])
def test_invalid_module_names(tmp_path, name):
    with pytest.raises(ArtifactWriteError):
        SourceFiler(tmp_path).write(name, "")
