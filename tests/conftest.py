"""
Timed Quiz - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport

# 테스트에서는 bcrypt 라운드를 최소로
os.environ.setdefault('BCRYPT_ROUNDS', '4')

from api.app import create_app
from api.sample_questions import SAMPLE_STUDENT_EMAIL, SAMPLE_STUDENT_PASSWORD
import api.session as session

BASE_URL = 'http://test'


@pytest.fixture
def app():
    """Fresh app with an empty in-memory store and seeded defaults"""
    session.reset()
    yield create_app(start_cleanup=False)
    session.reset()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=BASE_URL) as ac:
        yield ac


@pytest.fixture
async def logged_in_client(client: AsyncClient) -> AsyncClient:
    response = await client.post(
        '/api/auth/login',
        json={'email': SAMPLE_STUDENT_EMAIL, 'password': SAMPLE_STUDENT_PASSWORD},
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def sample_student():
    return session.find_student_by_email(SAMPLE_STUDENT_EMAIL)
