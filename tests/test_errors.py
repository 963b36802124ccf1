import pytest
from tortoise.exceptions import DBConnectionError, OperationalError

from restopos.core.errors import ErrorKind, NotFoundError, PersistenceError, translate_db_errors


@pytest.mark.parametrize("exc", [OperationalError("locked"), DBConnectionError("gone")])
def test_db_failures_become_persistence_errors(exc):
    with pytest.raises(PersistenceError) as excinfo:
        with translate_db_errors("closing order"):
            raise exc

    err = excinfo.value
    assert err.kind == ErrorKind.PERSISTENCE_ERROR
    assert err.status_code == 503
    assert err.details == {"retryable": True}
    assert err.__cause__ is exc


def test_business_errors_pass_through():
    with pytest.raises(NotFoundError):
        with translate_db_errors("closing order"):
            raise NotFoundError("Order", "42")


def test_other_errors_are_not_translated():
    with pytest.raises(ValueError):
        with translate_db_errors("closing order"):
            raise ValueError("bug")
