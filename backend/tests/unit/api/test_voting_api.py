"""
Unit Tests for Voting Endpoints
Tests for: ballot, casting, status, my votes
"""
from typing import List

import pytest
from httpx import AsyncClient

from app.models.candidate import Candidate
from app.models.position import Position
from app.models.voting_session import VotingSession


class TestCastVote:

    @pytest.mark.asyncio
    async def test_activated_student_votes_once(
        self, client: AsyncClient, activated_auth_headers, candidates: List[Candidate], open_session
    ):
        """First ballot is accepted, a second one for the same position is refused"""
        ballot = {'position_id': candidates[0].position_id, 'candidate_id': candidates[0].id}

        first = await client.post('/api/v1/voting/cast-vote', json=ballot, headers=activated_auth_headers)
        assert first.status_code == 200
        assert first.json() == {'message': 'Vote cast successfully.'}

        ballot['candidate_id'] = candidates[1].id
        second = await client.post('/api/v1/voting/cast-vote', json=ballot, headers=activated_auth_headers)
        assert second.status_code == 400
        assert second.json()['code'] == 'ALREADY_VOTED'
        assert second.json()['message'] == 'You have already voted for this position.'

    @pytest.mark.asyncio
    async def test_unverified_student_rejected(
        self, client: AsyncClient, auth_headers, candidates: List[Candidate], open_session
    ):
        response = await client.post(
            '/api/v1/voting/cast-vote',
            json={'position_id': candidates[0].position_id, 'candidate_id': candidates[0].id},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'NOT_ACTIVATED'

    @pytest.mark.asyncio
    async def test_voting_closed(self, client: AsyncClient, activated_auth_headers, candidates: List[Candidate]):
        response = await client.post(
            '/api/v1/voting/cast-vote',
            json={'position_id': candidates[0].position_id, 'candidate_id': candidates[0].id},
            headers=activated_auth_headers,
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'VOTING_CLOSED'

    @pytest.mark.asyncio
    async def test_invalid_candidate(
        self, client: AsyncClient, activated_auth_headers, candidates: List[Candidate], open_session
    ):
        response = await client.post(
            '/api/v1/voting/cast-vote',
            json={'position_id': candidates[0].position_id, 'candidate_id': 'not-a-candidate'},
            headers=activated_auth_headers,
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_CANDIDATE'

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post('/api/v1/voting/cast-vote', json={'position_id': 'a', 'candidate_id': 'b'})
        assert response.status_code in (401, 403)


class TestBallot:

    @pytest.mark.asyncio
    async def test_ballot_lists_active_candidates(
        self, client: AsyncClient, db_session, activated_auth_headers, position: Position,
        candidates: List[Candidate], open_session
    ):
        candidates[1].is_active = False
        await db_session.commit()

        response = await client.get('/api/v1/voting/positions', headers=activated_auth_headers)

        assert response.status_code == 200
        ballot = response.json()
        assert len(ballot) == 1
        assert ballot[0]['id'] == position.id
        assert ballot[0]['has_voted'] is False
        assert [c['id'] for c in ballot[0]['candidates']] == [candidates[0].id]

    @pytest.mark.asyncio
    async def test_ballot_marks_voted_positions(
        self, client: AsyncClient, activated_auth_headers, candidates: List[Candidate], open_session
    ):
        await client.post(
            '/api/v1/voting/cast-vote',
            json={'position_id': candidates[0].position_id, 'candidate_id': candidates[0].id},
            headers=activated_auth_headers,
        )

        response = await client.get('/api/v1/voting/positions', headers=activated_auth_headers)

        assert response.json()[0]['has_voted'] is True

    @pytest.mark.asyncio
    async def test_ballot_requires_activation(self, client: AsyncClient, auth_headers, open_session):
        response = await client.get('/api/v1/voting/positions', headers=auth_headers)
        assert response.status_code == 403
        assert response.json()['error']['code'] == 'NOT_AUTHORIZED'

    @pytest.mark.asyncio
    async def test_ballot_when_closed(self, client: AsyncClient, activated_auth_headers, candidates):
        response = await client.get('/api/v1/voting/positions', headers=activated_auth_headers)

        assert response.status_code == 400
        assert response.json()['code'] == 'VOTING_CLOSED'


class TestVotingStatus:

    @pytest.mark.asyncio
    async def test_closed(self, client: AsyncClient):
        response = await client.get('/api/v1/voting/voting-status')

        assert response.status_code == 200
        assert response.json()['is_active'] is False

    @pytest.mark.asyncio
    async def test_open(self, client: AsyncClient, open_session: VotingSession):
        response = await client.get('/api/v1/voting/voting-status')

        data = response.json()
        assert data['is_active'] is True
        assert data['session_id'] == open_session.id
        assert data['title'] == open_session.title


class TestMyVotes:

    @pytest.mark.asyncio
    async def test_lists_own_votes(
        self, client: AsyncClient, activated_auth_headers, candidates: List[Candidate], open_session
    ):
        await client.post(
            '/api/v1/voting/cast-vote',
            json={'position_id': candidates[1].position_id, 'candidate_id': candidates[1].id},
            headers=activated_auth_headers,
        )

        response = await client.get('/api/v1/voting/my-votes', headers=activated_auth_headers)

        assert response.status_code == 200
        votes = response.json()
        assert len(votes) == 1
        assert votes[0]['candidate_id'] == candidates[1].id
        assert votes[0]['position_title'] == 'President'
