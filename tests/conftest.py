import pytest
from rest_framework.test import APIClient

from games.models import Game
from reviews.services import create_or_update_review
from users.models import User


@pytest.fixture(autouse=True)
def no_external_credentials(settings):
    """테스트 중에는 IGDB/Steam 실제 호출이 일어나지 않도록 인증 정보를 비워 둠"""
    settings.IGDB_CLIENT_ID = ''
    settings.IGDB_CLIENT_SECRET = ''
    settings.STEAM_API_KEY = ''
    settings.BATCH_SECRET = 'test-batch-secret'
    settings.ADMIN_EMAIL = 'admin@gampfire.com'


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    counter = {'n': 0}

    def _make(username=None, **extra):
        counter['n'] += 1
        username = username or f'user{counter["n"]}'
        extra.setdefault('email', f'{username}@example.com')
        extra.setdefault('name', username)
        return User.objects.create_user(username=username, password='password123', **extra)

    return _make


@pytest.fixture
def user(make_user):
    return make_user('gamer')


@pytest.fixture
def auth_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def client_for():
    def _client(u):
        client = APIClient()
        client.force_authenticate(user=u)
        return client

    return _client


@pytest.fixture
def make_game(db):
    counter = {'n': 0}

    def _make(title=None, **extra):
        counter['n'] += 1
        extra.setdefault('igdb_id', 1000 + counter['n'])
        return Game.objects.create(title=title or f'Game {counter["n"]}', **extra)

    return _make


@pytest.fixture
def game(make_game):
    return make_game('Elden Ring', genres=['Role-playing (RPG)', 'Adventure'], platforms=['PC (Microsoft Windows)'])


@pytest.fixture
def rate():
    """create_or_update_review 단축 (알림 없음)"""
    def _rate(u, g, rating, **kwargs):
        kwargs.setdefault('notify', False)
        review, _ = create_or_update_review(u, g, rating, **kwargs)
        return review

    return _rate
