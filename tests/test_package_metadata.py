"""Package metadata tests."""

from pathlib import Path


def test_version_is_available() -> None:
    from fastapi_couriers import __version__

    assert __version__ == "0.1.0"


def test_py_typed_marker_exists() -> None:
    marker = (
        Path(__file__).resolve().parents[1]
        / "src"
        / "fastapi_couriers"
        / "py.typed"
    )
    assert marker.exists(), "py.typed marker file must exist"


def test_all_exports_importable() -> None:
    import fastapi_couriers

    for name in fastapi_couriers.__all__:
        obj = getattr(fastapi_couriers, name)
        assert obj is not None, f"{name} resolved to None"


def test_getattr_raises_for_unknown_attribute() -> None:
    import pytest

    import fastapi_couriers

    with pytest.raises(AttributeError, match="no_such_thing"):
        fastapi_couriers.no_such_thing  # noqa: B018
