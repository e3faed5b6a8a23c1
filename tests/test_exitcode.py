import pytest

from mcfg.exitcode import (
    BusinessError,
    ExitCode,
    IOFailureError,
    LockConflictError,
    McfgError,
    ParamError,
    exit_code_for,
)


def test_none_is_success():
    assert exit_code_for(None) is ExitCode.SUCCESS


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (ParamError("bad"), ExitCode.PARAM),
        (IOFailureError("disk"), ExitCode.IO),
        (LockConflictError("held"), ExitCode.LOCK_CONFLICT),
        (BusinessError("nope"), ExitCode.BUSINESS),
        (RuntimeError("boom"), ExitCode.BUSINESS),
    ],
)
def test_error_types_map_to_codes(error, expected):
    assert exit_code_for(error) is expected


@pytest.mark.parametrize(
    "message",
    [
        'required flag(s) "name" not set',
        "unknown flag: --bogus",
        "accepts 1 arg(s), received 0",
        "mutually exclusive",
    ],
)
def test_plain_errors_that_look_like_param_errors(message):
    assert exit_code_for(ValueError(message)) is ExitCode.PARAM


def test_wrapped_param_error_is_found_through_cause():
    try:
        try:
            raise ParamError("inner")
        except ParamError as inner:
            raise RuntimeError("outer") from inner
    except RuntimeError as outer:
        assert exit_code_for(outer) is ExitCode.PARAM


def test_param_takes_precedence_over_io_in_chain():
    outer = IOFailureError("outer")
    outer.__cause__ = ParamError("inner")
    assert exit_code_for(outer) is ExitCode.PARAM


def test_message_carries_kind_prefix():
    assert str(ParamError("x")) == "parameter error: x"
    assert str(LockConflictError("y")) == "lock conflict: y"
    assert str(IOFailureError()) == "io error"


@pytest.mark.parametrize(
    ("error_type", "expected"),
    [
        (BusinessError, ExitCode.BUSINESS),
        (ParamError, ExitCode.PARAM),
        (IOFailureError, ExitCode.IO),
        (LockConflictError, ExitCode.LOCK_CONFLICT),
    ],
)
def test_hierarchy_shares_base(error_type, expected):
    with pytest.raises(McfgError) as excinfo:
        raise error_type("z")
    assert exit_code_for(excinfo.value) is expected
    assert str(excinfo.value).endswith(": z")