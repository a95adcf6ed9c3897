import importlib
import sys
import warnings

from fastapi import status

import research_partner.errors as errors_package
from research_partner.errors.response_codes import ErrorCode, code_for_status, error_response

MODULE = "research_partner.errors.response_codes"


def test_module_imports_without_deprecation_warnings(monkeypatch):
    monkeypatch.delitem(sys.modules, MODULE)
    monkeypatch.setattr(errors_package, "response_codes", errors_package.response_codes)

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        importlib.import_module(MODULE)


def test_framework_statuses_map_to_generic_codes():
    assert code_for_status(status.HTTP_404_NOT_FOUND) is ErrorCode.NOT_FOUND
    assert code_for_status(status.HTTP_429_TOO_MANY_REQUESTS) is ErrorCode.RATE_LIMIT_EXCEEDED
    assert code_for_status(status.HTTP_418_IM_A_TEAPOT) is ErrorCode.INTERNAL_ERROR


def test_error_envelope():
    assert error_response(ErrorCode.INVALID_OTP) == {
        "success": False,
        "code": 4009,
        "message": "Invalid OTP code",
    }
    assert error_response(ErrorCode.INVALID_INPUT, errors=[{"field": "body -> email"}])["errors"] == [
        {"field": "body -> email"}
    ]
