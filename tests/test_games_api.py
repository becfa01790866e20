from unittest.mock import patch

import pytest
import requests

from games import igdb
from games.igdb import IGDBConfigError
from games.models import GameSimilarity

pytestmark = pytest.mark.django_db


def igdb_game(igdb_id, name, **extra):
    return {'id': igdb_id, 'name': name, 'genres': [{'name': 'Shooter'}], **extra}


def test_game_list_merges_db_stats(api_client, make_game):
    make_game('Halo', igdb_id=740, average_rating=4.5, total_reviews=12)
    raw = [igdb_game(740, 'Halo'), igdb_game(741, 'Unknown')]

    with patch('games.igdb.get_popular_games', return_value=raw) as popular:
        response = api_client.get('/api/games/list/', {'limit': 2, 'genres': 'Shooter'})

    popular.assert_called_once_with(2, 0, ['Shooter'])
    assert response.data['hasMore'] is True
    halo, unknown = response.data['games']
    assert (halo['averageRating'], halo['totalReviews']) == (4.5, 12)
    assert (unknown['averageRating'], unknown['totalReviews']) == (0, 0)
    assert halo['genresKo'] == ['슈팅']


def test_game_list_recent(api_client):
    with patch('games.igdb.get_recent_games', return_value=[]) as recent:
        response = api_client.get('/api/games/list/', {'type': 'recent'})
    recent.assert_called_once()
    assert response.data == {'games': [], 'hasMore': False}


def test_game_list_without_igdb_credentials(api_client):
    response = api_client.get('/api/games/list/')
    assert response.status_code == 503


def test_search_keeps_rated_main_games(api_client):
    raw = [
        igdb_game(1, 'Doom', rating_count=50),
        igdb_game(2, 'Doom Eternal', rating_count=900),
        igdb_game(3, 'Doom Eternal - The Ancient Gods', rating_count=100),
        igdb_game(4, 'Doom Fan Remake'),
    ]
    with patch('games.igdb.search_games', return_value=raw):
        response = api_client.get('/api/games/search/', {'q': 'doom'})

    assert [g['id'] for g in response.data['games']] == [2, 1]


def test_search_requires_query(api_client):
    assert api_client.get('/api/games/search/', {'q': '  '}).status_code == 400


def test_popular_excludes_rated_games(auth_client, user, make_game, rate):
    rate(user, make_game('Rated', igdb_id=10), 4.0)
    raw = [igdb_game(10, 'Rated'), igdb_game(11, 'Fresh')]

    with patch('games.igdb.get_popular_games', return_value=raw) as popular:
        response = auth_client.get('/api/games/popular/', {'limit': 5})

    assert popular.call_args[0][0] == 10
    assert [g['id'] for g in response.data['games']] == [11]


def test_hot_games(api_client, make_game):
    make_game('Warm', hot_score=0.3)
    make_game('Hottest', hot_score=0.9)
    make_game('Cold')

    response = api_client.get('/api/games/hot/', {'limit': 1})

    assert response.data['total'] == 2
    assert response.data['hasMore'] is True
    top = response.data['games'][0]
    assert top['title'] == 'Hottest'
    assert top['isHot'] is True


class TestGameDetail:
    def test_from_db(self, auth_client, user, make_user, game, rate):
        rate(make_user('other'), game, 4.0, comment='좋음')
        rate(user, game, 5.0)

        response = auth_client.get(f'/api/games/{game.igdb_id}/')

        assert response.status_code == 200
        detail = response.data['game']
        assert detail['title'] == 'Elden Ring'
        assert detail['genresKo'] == ['RPG', '어드벤처']
        assert detail['label'] == '매우 긍정적'
        assert len(response.data['reviews']) == 2
        assert response.data['userReview']['rating'] == 5.0
        assert response.data['statistics']['totalReviews'] == 2

    def test_fetches_missing_game(self, api_client, make_game):
        fetched = make_game('Celeste', igdb_id=26226)
        with patch('games.views.igdb.upsert_game_from_igdb', side_effect=[fetched]) as upsert:
            response = api_client.get('/api/games/5000/')

        upsert.assert_called_once_with(5000)
        assert response.data['game']['title'] == 'Celeste'
        assert response.data['userReview'] is None

    def test_unknown_game(self, api_client):
        with patch('games.views.igdb.upsert_game_from_igdb', return_value=None):
            assert api_client.get('/api/games/5000/').status_code == 404

    def test_igdb_not_configured(self, api_client):
        with patch('games.views.igdb.upsert_game_from_igdb', side_effect=IGDBConfigError('missing')):
            assert api_client.get('/api/games/5000/').status_code == 503


def test_similar_games(api_client, make_game):
    base, close, far = make_game('Base'), make_game('Close'), make_game('Far')
    for other, score, rank in [(close, 0.92, 1), (far, 0.35, 2)]:
        a, b = GameSimilarity.normalize_game_ids(base.pk, other.pk)
        GameSimilarity.objects.create(game_a_id=a, game_b_id=b, similarity_score=score, similarity_rank=rank)

    response = api_client.get(f'/api/games/{base.igdb_id}/similar/')

    assert [(g['title'], g['similarity']) for g in response.data['games']] == [('Close', 0.92), ('Far', 0.35)]
    assert api_client.get('/api/games/99999/similar/').status_code == 404


def test_game_list_when_twitch_is_down(api_client, settings):
    settings.IGDB_CLIENT_ID = 'client'
    settings.IGDB_CLIENT_SECRET = 'secret'
    igdb.reset_token_cache()

    with patch('games.igdb.requests.post', side_effect=requests.ConnectionError('twitch down')):
        response = api_client.get('/api/games/list/')

    assert response.status_code == 200
    assert response.data == {'games': [], 'hasMore': False}
