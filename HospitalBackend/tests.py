import pytest
from rest_framework.exceptions import ValidationError

from HospitalBackend.exceptions import InvalidInput, NotFound, api_exception_handler
from HospitalBackend.workflow import StatusMachine

LIGHT = StatusMachine('light', {
    'red': {'green'},
    'green': {'yellow'},
    'yellow': {'red'},
    'off': set(),
})


def test_allowed_transition():
    assert LIGHT.ensure('red', 'green') == 'green'


def test_same_state_is_noop():
    assert LIGHT.can_transition('yellow', 'yellow')
    assert LIGHT.ensure('off', 'off') == 'off'


def test_illegal_transition_rejected():
    with pytest.raises(InvalidInput) as exc:
        LIGHT.ensure('red', 'yellow')
    assert 'from red to yellow' in str(exc.value.detail)


def test_unknown_state_rejected():
    with pytest.raises(InvalidInput) as exc:
        LIGHT.ensure('red', 'blue')
    assert "'blue' is not a valid light status" in str(exc.value.detail)


def test_terminal_states():
    assert LIGHT.is_terminal('off')
    assert not LIGHT.is_terminal('red')


def test_handler_wraps_api_errors():
    response = api_exception_handler(NotFound('Patient not found'), {})
    assert response.status_code == 404
    assert response.data == {'success': False, 'message': 'Patient not found'}


def test_handler_keeps_validation_errors():
    response = api_exception_handler(ValidationError({'time': ['This field is required.']}), {})
    assert response.status_code == 400
    assert response.data['success'] is False
    assert response.data['message'] == 'time: This field is required.'
    assert response.data['errors'] == {'time': ['This field is required.']}


def test_handler_turns_unexpected_errors_into_500():
    response = api_exception_handler(RuntimeError('database is on fire'), {})
    assert response.status_code == 500
    assert response.data == {'success': False, 'message': 'database is on fire'}
