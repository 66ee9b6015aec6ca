import pytest

from permission_granter.errors import InvalidIdentifierError
from permission_granter.prompts import ask_app_id, confirm
from permission_granter.validation import is_valid_guid, normalize_guid

GUID = "75359482-378d-4052-8f01-80520e7db3cd"


@pytest.mark.parametrize(
    "candidate",
    [
        GUID,
        GUID.upper(),
        "75359482378d40528f0180520e7db3cd",
        "{75359482-378d-4052-8f01-80520e7db3cd}",
        "(75359482-378d-4052-8f01-80520e7db3cd)",
        f"  {GUID}\n",
    ],
)
def test_valid_guid_forms(candidate):
    assert is_valid_guid(candidate)


@pytest.mark.parametrize(
    "candidate",
    [
        "",
        "not-a-guid",
        GUID + "x",
        GUID + "-0",
        "75359482-378d-4052-8f01-80520e7db3c",  # short last group
        "7535948-2378d-4052-8f01-80520e7db3cd",  # shifted dash
        "75359482-378d-4052-8f01-80520e7db3cg",  # not hex
        "{75359482-378d-4052-8f01-80520e7db3cd",  # unbalanced brace
        "{75359482-378d-4052-8f01-80520e7db3cd)",
        "{75359482378d40528f0180520e7db3cd}",
        None,
        12345,
    ],
)
def test_invalid_guid_forms(candidate):
    assert not is_valid_guid(candidate)


def test_normalize_guid():
    assert normalize_guid("{75359482-378D-4052-8F01-80520E7DB3CD}") == GUID
    assert normalize_guid("75359482378d40528f0180520e7db3cd") == GUID


def test_normalize_guid_rejects_garbage():
    with pytest.raises(InvalidIdentifierError):
        normalize_guid("not-a-guid")


def test_ask_app_id_reprompts_until_valid():
    answers = iter(["not-a-guid", "", GUID.upper()])
    printed = []

    result = ask_app_id(input_fn=lambda _: next(answers), print_fn=printed.append)

    assert result == GUID
    assert len(printed) == 2
    assert "not-a-guid" in printed[0]


@pytest.mark.parametrize("answer,expected", [("Y", True), ("yes", True), ("n", False), ("", False), ("maybe", False)])
def test_confirm(answer, expected):
    assert confirm("Proceed?", input_fn=lambda _: answer) is expected


def test_confirm_end_of_input_means_no():
    def closed_stdin(_):
        raise EOFError

    assert confirm("Proceed?", input_fn=closed_stdin) is False
