"""
Unit Tests for the error hierarchy and response envelope
"""
from app.core.exceptions import (
    ConflictError,
    EVotingError,
    InvalidMatricNumberError,
    MatricNumberInUseError,
    PositionNotFoundError,
    PreconditionError,
    UpstreamError,
    ValidationError,
    VotingSessionNotFoundError,
    error_response,
)


class TestErrorCodes:

    def test_not_found_codes(self):
        error = PositionNotFoundError('abc')

        assert error.status_code == 404
        assert error.code == 'POSITION_NOT_FOUND'
        assert error.details == {'resource_type': 'Position', 'resource_id': 'abc'}

    def test_multi_word_resource_code(self):
        assert VotingSessionNotFoundError('abc').code == 'VOTING_SESSION_NOT_FOUND'

    def test_validation_subclasses_keep_400(self):
        assert InvalidMatricNumberError('12').status_code == 400
        assert InvalidMatricNumberError('12').code == 'INVALID_MATRIC_NUMBER'
        assert MatricNumberInUseError('123456789').code == 'MATRIC_IN_USE'
        assert ValidationError('bad', field='x').details == {'field': 'x'}

    def test_workflow_errors(self):
        assert PreconditionError('later').status_code == 400
        assert ConflictError('taken').status_code == 409

    def test_upstream_error_names_service(self):
        error = UpstreamError('biometric', 'timed out')

        assert error.status_code == 502
        assert error.code == 'UPSTREAM_ERROR'
        assert error.message == 'biometric: timed out'
        assert error.details == {'service': 'biometric'}

    def test_base_defaults(self):
        error = EVotingError('boom')
        assert error.status_code == 500
        assert error.code == 'INTERNAL_ERROR'


class TestErrorResponse:

    def test_envelope_shape(self):
        body = error_response(ConflictError('taken', details={'id': '1'}))

        assert body == {
            'success': False,
            'message': 'taken',
            'error': {'code': 'CONFLICT', 'message': 'taken', 'details': {'id': '1'}},
        }
