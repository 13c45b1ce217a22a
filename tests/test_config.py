import pytest
from pydantic import ValidationError

from joinery.config import ContainerDefaults


def test_defaults():
    defaults = ContainerDefaults()

    assert defaults.share is True
    assert defaults.autowire is True


def test_from_properties():
    defaults = ContainerDefaults.from_properties({"share": False})

    assert defaults.share is False
    assert defaults.autowire is True


def test_merged_with_keeps_existing_options():
    defaults = ContainerDefaults.from_properties({"share": False})

    merged = defaults.merged_with({"autowire": False})

    assert (merged.share, merged.autowire) == (False, False)
    assert (defaults.share, defaults.autowire) == (False, True)


def test_unknown_option_rejected():
    with pytest.raises(ValidationError):
        ContainerDefaults.from_properties({"shared": False})


def test_invalid_value_rejected():
    with pytest.raises(ValidationError):
        ContainerDefaults.from_properties({"share": "sometimes"})


def test_defaults_are_immutable():
    defaults = ContainerDefaults()

    with pytest.raises(ValidationError):
        defaults.share = False
