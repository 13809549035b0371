"""
Unit Tests for Student Verification Endpoints
Document and face services are replaced through dependency overrides.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.student import get_document_service, get_face_verification_service
from app.core.exceptions import UpstreamError
from app.main import app
from app.models.user import User
from app.modules.verification.activation_gate import VerificationOutcome

PDF = ('form.pdf', b'%PDF-1.4 course form', 'application/pdf')
FACE = ('face.jpg', b'\xff\xd8\xff\xe0face', 'image/jpeg')
DOC_URL = 'http://storage.test/course-forms/form.pdf'
FACE_URL = 'http://storage.test/faces/face.jpg'


def override_document(outcome=None, error=None) -> MagicMock:
    service = MagicMock()
    service.verify_course_form = AsyncMock(return_value=outcome, side_effect=error)
    app.dependency_overrides[get_document_service] = lambda: service
    return service


def override_face(outcome=None, error=None) -> MagicMock:
    service = MagicMock()
    service.verify_and_register = AsyncMock(return_value=outcome, side_effect=error)
    app.dependency_overrides[get_face_verification_service] = lambda: service
    return service


@pytest.fixture
async def document_verified_user(db_session: AsyncSession, test_user: User) -> User:
    test_user.matric_number = '190591001'
    test_user.full_name = 'Adebayo Okafor'
    test_user.document_verified = True
    test_user.document_url = DOC_URL
    await db_session.commit()
    return test_user


class TestUpdateDetails:

    @pytest.mark.asyncio
    async def test_update_details(self, client: AsyncClient, auth_headers):
        response = await client.post(
            '/api/v1/student/update-details',
            json={'matric_number': '190591001', 'full_name': 'Adebayo Okafor'},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert data['status']['matric_number'] == '190591001'
        assert data['status']['stage'] == 'HAS_MATRIC'

    @pytest.mark.asyncio
    async def test_invalid_matric(self, client: AsyncClient, auth_headers):
        response = await client.post(
            '/api/v1/student/update-details',
            json={'matric_number': '19-ABC', 'full_name': 'Adebayo Okafor'},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'INVALID_MATRIC_NUMBER'

    @pytest.mark.asyncio
    async def test_matric_in_use(self, client: AsyncClient, auth_headers, activated_user: User):
        response = await client.post(
            '/api/v1/student/update-details',
            json={'matric_number': activated_user.matric_number, 'full_name': 'Adebayo Okafor'},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'MATRIC_IN_USE'

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post(
            '/api/v1/student/update-details',
            json={'matric_number': '190591001', 'full_name': 'Adebayo Okafor'},
        )
        assert response.status_code in (401, 403)


class TestUploadDocument:

    @pytest.mark.asyncio
    async def test_requires_details_first(self, client: AsyncClient, auth_headers):
        service = override_document(VerificationOutcome(True, url=DOC_URL))

        response = await client.post('/api/v1/student/upload-document', files={'document': PDF}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'PRECONDITION_FAILED'
        service.verify_course_form.assert_not_called()

    @pytest.mark.asyncio
    async def test_verified_document(self, client: AsyncClient, db_session: AsyncSession, test_user: User, auth_headers):
        test_user.matric_number = '190591001'
        await db_session.commit()
        service = override_document(VerificationOutcome(True, url=DOC_URL))

        response = await client.post('/api/v1/student/upload-document', files={'document': PDF}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['status']['document_verified'] is True
        assert data['status']['stage'] == 'DOCUMENT_VERIFIED'
        args = service.verify_course_form.await_args.args
        assert args[1] == 'application/pdf'
        assert args[2] == '190591001'

    @pytest.mark.asyncio
    async def test_mismatched_document(self, client: AsyncClient, db_session: AsyncSession, test_user: User, auth_headers):
        test_user.matric_number = '190591001'
        await db_session.commit()
        override_document(VerificationOutcome(False, url=DOC_URL, reason='Course form does not match'))

        response = await client.post('/api/v1/student/upload-document', files={'document': PDF}, headers=auth_headers)

        assert response.status_code == 400
        data = response.json()
        assert data['success'] is False
        assert data['message'] == 'Course form does not match'
        assert data['status']['document_verified'] is False

    @pytest.mark.asyncio
    async def test_already_verified_is_noop(self, client: AsyncClient, document_verified_user: User, auth_headers):
        service = override_document(VerificationOutcome(False))

        response = await client.post('/api/v1/student/upload-document', files={'document': PDF}, headers=auth_headers)

        assert response.status_code == 200
        service.verify_course_form.assert_not_called()


class TestVerifyFace:

    @pytest.mark.asyncio
    async def test_requires_document(self, client: AsyncClient, auth_headers):
        service = override_face(VerificationOutcome(True, url=FACE_URL, uid='190591001@ns'))

        response = await client.post('/api/v1/student/verify-face', files={'face_image': FACE}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'PRECONDITION_FAILED'
        service.verify_and_register.assert_not_called()

    @pytest.mark.asyncio
    async def test_face_activates_account(self, client: AsyncClient, document_verified_user: User, auth_headers):
        override_face(VerificationOutcome(True, url=FACE_URL, uid='190591001@ns'))

        response = await client.post('/api/v1/student/verify-face', files={'face_image': FACE}, headers=auth_headers)

        assert response.status_code == 200
        status = response.json()['status']
        assert status['face_verified'] is True
        assert status['is_activated'] is True
        assert status['stage'] == 'ACTIVATED'

    @pytest.mark.asyncio
    async def test_duplicate_face(self, client: AsyncClient, document_verified_user: User, auth_headers):
        override_face(VerificationOutcome(False, url=FACE_URL, reason='This face is already registered to another account'))

        response = await client.post('/api/v1/student/verify-face', files={'face_image': FACE}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()['status']['is_activated'] is False

    @pytest.mark.asyncio
    async def test_upstream_failure_leaves_flags(self, client: AsyncClient, document_verified_user: User, auth_headers):
        """A failing biometric service reports 502 and activates nothing"""
        override_face(error=UpstreamError('biometric', 'faces/detect.json timed out'))

        response = await client.post('/api/v1/student/verify-face', files={'face_image': FACE}, headers=auth_headers)

        assert response.status_code == 502
        assert response.json()['error']['code'] == 'UPSTREAM_ERROR'

        status = await client.get('/api/v1/student/verification-status', headers=auth_headers)
        assert status.json()['face_verified'] is False
        assert status.json()['is_activated'] is False
        assert status.json()['document_verified'] is True

    @pytest.mark.asyncio
    async def test_activated_is_noop(self, client: AsyncClient, activated_auth_headers):
        service = override_face(VerificationOutcome(False))

        response = await client.post(
            '/api/v1/student/verify-face', files={'face_image': FACE}, headers=activated_auth_headers
        )

        assert response.status_code == 200
        service.verify_and_register.assert_not_called()


class TestVerificationStatus:

    @pytest.mark.asyncio
    async def test_new_account(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/v1/student/verification-status', headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            'has_matric_number': False,
            'matric_number': None,
            'document_verified': False,
            'face_verified': False,
            'is_activated': False,
            'stage': 'NEW',
        }
