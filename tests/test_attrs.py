import pytest

from forgefetch.attrs import input_from_attrs, input_to_attrs
from forgefetch.errors import UnsupportedAttributeError, ValidationError
from forgefetch.models import Input, RefPin, RevPin

REV = "0123456789abcdef0123456789abcdef01234567"


def test_unknown_attribute_is_rejected_by_name() -> None:
    with pytest.raises(UnsupportedAttributeError) as excinfo:
        input_from_attrs(
            {"type": "github", "owner": "acme", "repo": "widget", "color": "red"},
            scheme_type="github",
        )

    assert "color" in str(excinfo.value)
    assert excinfo.value.context["attribute"] == "color"


def test_attrs_for_another_scheme_are_not_applicable() -> None:
    assert input_from_attrs({"type": "gitlab", "owner": "a", "repo": "b"}, scheme_type="github") is None
    assert input_from_attrs({"owner": "a", "repo": "b"}, scheme_type="github") is None


def test_full_record_roundtrip() -> None:
    attrs = {
        "type": "github",
        "owner": "acme",
        "repo": "widget",
        "rev": REV,
        "host": "ghe.example.com",
        "narHash": "sha256-abc",
        "lastModified": 1_700_000_000,
    }

    input = input_from_attrs(attrs, scheme_type="github")

    assert input == Input(
        type="github",
        owner="acme",
        repo="widget",
        pin=RevPin(REV),
        host="ghe.example.com",
        nar_hash="sha256-abc",
        last_modified=1_700_000_000,
    )
    assert input.is_fully_pinned
    assert input_to_attrs(input) == attrs


def test_ref_record_is_not_fully_pinned() -> None:
    input = input_from_attrs(
        {"type": "gitlab", "owner": "acme", "repo": "widget", "ref": "main"},
        scheme_type="gitlab",
    )

    assert input is not None
    assert input.pin == RefPin("main")
    assert not input.is_fully_pinned
    assert input_to_attrs(input) == {"type": "gitlab", "owner": "acme", "repo": "widget", "ref": "main"}


@pytest.mark.parametrize(
    "attrs",
    [
        {"type": "github", "repo": "widget"},
        {"type": "github", "owner": "acme"},
        {"type": "github", "owner": "", "repo": "widget"},
        {"type": "github", "owner": "acme", "repo": 7},
        {"type": "github", "owner": "acme", "repo": "widget", "rev": "abc"},
        {"type": "github", "owner": "acme", "repo": "widget", "lastModified": "yesterday"},
        {"type": "github", "owner": "acme", "repo": "widget", "lastModified": True},
        {"type": "github", "owner": "acme", "repo": "widget", "ref": "main", "rev": REV},
    ],
)
def test_invalid_records_raise_validation_error(attrs: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        input_from_attrs(attrs, scheme_type="github")


@pytest.mark.parametrize("ref", ["bad ref!", "x..y", "topic.lock", ""])
def test_invalid_ref_names_are_rejected(ref: str) -> None:
    attrs = {"type": "github", "owner": "acme", "repo": "widget", "ref": ref}

    with pytest.raises(ValidationError) as excinfo:
        input_from_attrs(attrs, scheme_type="github")

    assert excinfo.value.context["attribute"] == "ref"
