import io

import pytest

from mcfg.cli_inputs import (
    match_model_id,
    parse_env_items,
    resolve_optional_token,
    resolve_token,
)
from mcfg.exitcode import (
    BusinessError,
    ExitCode,
    IOFailureError,
    ParamError,
    exit_code_for,
)
from mcfg.model import ModelProfile

FIRST_ID = "01HQXBF7M6SJHMR6G32P5D1K7Y"
SECOND_ID = "01HQXBG84ESB7XJQ9WAAYH54AM"


class _BrokenReader:
    def read(self):
        raise OSError("boom")


def test_parse_env_items_basic():
    assert parse_env_items(["A=1", "B=two"]) == {"A": "1", "B": "two"}


def test_parse_env_items_splits_on_first_equals():
    assert parse_env_items(["DATABASE_URL=postgres://localhost/app?x=y"]) == {
        "DATABASE_URL": "postgres://localhost/app?x=y"
    }


def test_parse_env_items_empty_value_allowed():
    assert parse_env_items(["A="]) == {"A": ""}


def test_parse_env_items_later_value_wins():
    assert parse_env_items(["A=1", "A=2"]) == {"A": "2"}


def test_parse_env_items_none_is_empty():
    assert parse_env_items(None) == {}


@pytest.mark.parametrize("item", ["noequals", "=value"])
def test_parse_env_items_invalid(item):
    with pytest.raises(ParamError) as info:
        parse_env_items([item])
    assert f'invalid env item "{item}"' in str(info.value)
    assert exit_code_for(info.value) == ExitCode.PARAM


def test_resolve_token_literal():
    assert resolve_token(None, "secret", False, "") == "secret"


def test_resolve_token_from_stdin_trims():
    assert resolve_token(io.StringIO("  secret\n"), "", True, "") == "secret"


def test_resolve_token_from_binary_stdin():
    assert resolve_token(io.BytesIO(b"secret\n"), "", True, "") == "secret"


def test_resolve_token_from_file(tmp_path):
    token_file = tmp_path / "anthropic.token"
    token_file.write_text("secret\n")
    assert resolve_token(None, "", False, str(token_file)) == "secret"


def test_resolve_token_mutual_exclusion_is_param_error():
    with pytest.raises(ParamError) as info:
        resolve_token(io.StringIO("secret"), "secret", True, "")
    assert "mutually exclusive" in str(info.value)
    assert exit_code_for(info.value) == ExitCode.PARAM


def test_resolve_token_literal_and_file_exclusive(tmp_path):
    with pytest.raises(ParamError):
        resolve_token(None, "secret", False, str(tmp_path / "x"))


def test_resolve_token_requires_a_source():
    with pytest.raises(ParamError) as info:
        resolve_token(None, "", False, "")
    assert "exactly one auth token source is required" in str(info.value)


def test_resolve_token_empty_stdin_is_param_error():
    with pytest.raises(ParamError):
        resolve_token(io.StringIO("   \n"), "", True, "")


def test_resolve_optional_token_none_when_no_source():
    assert resolve_optional_token(None, "", False, "") is None


def test_resolve_optional_token_allows_empty_stdin():
    assert resolve_optional_token(io.StringIO("\n"), "", True, "") == ""


def test_resolve_optional_token_missing_file_is_io_error(tmp_path):
    with pytest.raises(IOFailureError) as info:
        resolve_optional_token(None, "", False, str(tmp_path / "missing.token"))
    assert "read auth token file" in str(info.value)
    assert exit_code_for(info.value) == ExitCode.IO


def test_resolve_optional_token_broken_stdin_is_io_error():
    with pytest.raises(IOFailureError) as info:
        resolve_optional_token(_BrokenReader(), "", True, "")
    assert "read auth token from stdin" in str(info.value)


def test_match_model_id_by_prefix():
    items = [ModelProfile(id=FIRST_ID), ModelProfile(id=SECOND_ID)]
    assert match_model_id(FIRST_ID[:8], items) == FIRST_ID


def test_match_model_id_exact():
    items = [ModelProfile(id=FIRST_ID)]
    assert match_model_id(FIRST_ID, items) == FIRST_ID


def test_match_model_id_not_found():
    with pytest.raises(BusinessError) as info:
        match_model_id("ZZZZZZZZ", [ModelProfile(id=FIRST_ID)])
    assert "not found" in str(info.value)


def test_match_model_id_too_short():
    with pytest.raises(ParamError):
        match_model_id("01HQ", [ModelProfile(id=FIRST_ID)])


def test_match_model_id_ambiguous():
    items = [ModelProfile(id=FIRST_ID), ModelProfile(id="01HQXBF7ZZZZZZZZZZZZZZZZZZ")]
    with pytest.raises(BusinessError) as info:
        match_model_id("01HQXBF7", items)
    assert "ambiguous" in str(info.value)