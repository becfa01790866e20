from datetime import timedelta
from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import call_command
from django.utils import timezone

from games import hot_scores
from games.hot_scores import calculate_hot_score, decay_stale_hot_scores, find_igdb_id_for_steam_app
from games.models import Game


def test_calculate_hot_score():
    assert calculate_hot_score(1, 1) == 1.0
    assert calculate_hot_score(1, None) == 0.6
    assert calculate_hot_score(None, 1) == 0.4
    assert calculate_hot_score(100, None) == pytest.approx(0.006)
    assert calculate_hot_score(101, 500) == 0
    assert calculate_hot_score() == 0


def test_find_igdb_id_prefers_steam_url_lookup():
    with patch('games.igdb.search_game_by_steam_id', return_value=7346), \
            patch('games.igdb.search_games') as search:
        assert find_igdb_id_for_steam_app(1145360, 'Hades') == 7346
    search.assert_not_called()


def test_find_igdb_id_falls_back_to_name_match():
    results = [{'id': 1, 'name': 'Hades II'}, {'id': 2, 'name': 'Hollow Knight™'}]
    with patch('games.igdb.search_game_by_steam_id', return_value=None), \
            patch('games.igdb.search_games', return_value=results):
        assert find_igdb_id_for_steam_app(367520, 'Hollow Knight') == 2


def test_find_igdb_id_uses_first_result_when_nothing_matches():
    with patch('games.igdb.search_game_by_steam_id', return_value=None), \
            patch('games.igdb.search_games', return_value=[{'id': 5, 'name': 'Something Else'}]):
        assert find_igdb_id_for_steam_app(1, 'Unrelated') == 5


@pytest.mark.django_db
def test_decay_only_touches_stale_scores(make_game):
    now = timezone.now()
    stale = make_game(hot_score=1.0, hot_score_updated_at=now - timedelta(hours=30))
    never = make_game(hot_score=0.5)
    fresh = make_game(hot_score=1.0, hot_score_updated_at=now - timedelta(hours=1))
    cold = make_game(hot_score=0)

    assert decay_stale_hot_scores(now) == 2

    stale.refresh_from_db()
    never.refresh_from_db()
    fresh.refresh_from_db()
    cold.refresh_from_db()
    assert stale.hot_score == pytest.approx(0.9)
    assert never.hot_score == pytest.approx(0.45)
    assert fresh.hot_score == 1.0
    assert cold.hot_score == 0


@pytest.mark.django_db
def test_update_hot_scores_creates_updates_and_reports(make_game):
    existing = make_game('Counter-Strike 2', igdb_id=242408, cover_image='https://img/cs2.jpg')
    stale = make_game('Old Hit', hot_score=1.0, hot_score_updated_at=timezone.now() - timedelta(days=3))

    top_sellers = [{'appId': 730, 'name': 'Counter-Strike 2', 'rank': 1}, {'appId': 1145360, 'name': 'Hades', 'rank': 2}]
    most_played = [{'appId': 730, 'rank': 1}, {'appId': 999, 'rank': 2}]
    igdb_ids = {730: 242408, 1145360: 113112, 999: None}
    hades = {
        'id': 113112,
        'name': 'Hades',
        'cover': {'url': '//images.igdb.com/igdb/image/upload/t_thumb/hades.jpg'},
        'genres': [{'name': 'Indie'}],
    }

    with patch('games.steam.get_top_sellers', return_value=top_sellers), \
            patch('games.steam.get_most_played', return_value=most_played), \
            patch.object(hot_scores, 'find_igdb_id_for_steam_app', side_effect=lambda app_id, name: igdb_ids[app_id]), \
            patch('games.igdb.get_game_by_id', return_value=hades) as get_game:
        result = hot_scores.update_hot_scores(delay=0)

    stats = result['stats']
    assert stats['topSellersCount'] == 2
    assert stats['mostPlayedCount'] == 2
    assert stats['uniqueGames'] == 3
    assert stats['updatedCount'] == 1
    assert stats['createdCount'] == 1
    assert stats['decayedCount'] == 1
    assert result['errors'] == []

    # 커버가 있는 기존 게임은 IGDB 를 다시 조회하지 않음
    get_game.assert_called_once_with(113112)

    existing.refresh_from_db()
    assert existing.hot_score == 1.0
    assert existing.steam_appid == 730

    created = Game.objects.get(igdb_id=113112)
    assert created.title == 'Hades'
    assert created.steam_appid == 1145360
    assert created.hot_score == pytest.approx(0.594)
    assert created.genres == ['Indie']

    stale.refresh_from_db()
    assert stale.hot_score == pytest.approx(0.9)


@pytest.mark.django_db
def test_update_hot_scores_collects_item_errors():
    with patch('games.steam.get_top_sellers', return_value=[{'appId': 1, 'name': 'Broken', 'rank': 1}]), \
            patch('games.steam.get_most_played', return_value=[]), \
            patch.object(hot_scores, 'find_igdb_id_for_steam_app', side_effect=RuntimeError('boom')):
        result = hot_scores.update_hot_scores(delay=0)

    assert result['stats']['errors'] == 1
    assert 'boom' in result['errors'][0]


@pytest.mark.django_db
def test_update_tags_for_reviewed_games(make_game, user, rate):
    with_steam = make_game('Hades', steam_appid=1145360)
    via_igdb = make_game('Celeste')
    unreviewed = make_game('Nobody Played')
    tagged = make_game('Tagged', tags=['Indie'])
    for g in (with_steam, via_igdb, tagged):
        rate(user, g, 4.0)

    igdb_game = {'id': via_igdb.igdb_id, 'websites': [{'url': 'https://store.steampowered.com/app/504230/'}]}
    with patch('games.igdb.get_game_by_id', return_value=igdb_game), \
            patch('games.steam.get_steam_tags', return_value=['Platformer', 'Difficult']) as get_tags:
        result = hot_scores.update_tags(delay=0)

    assert result['updated'] == 2
    assert result['failed'] == 0
    assert sorted(call.args[0] for call in get_tags.call_args_list) == [504230, 1145360]

    via_igdb.refresh_from_db()
    assert via_igdb.steam_appid == 504230
    assert via_igdb.tags == ['Platformer', 'Difficult']
    unreviewed.refresh_from_db()
    assert unreviewed.tags is None


@pytest.mark.django_db
class TestBatchEndpoints:
    def test_update_requires_secret(self, api_client):
        response = api_client.post('/api/batch/update-hot-scores/')
        assert response.status_code == 401

        response = api_client.post('/api/batch/update-hot-scores/', HTTP_AUTHORIZATION='Bearer wrong')
        assert response.status_code == 401

    def test_update_with_secret(self, api_client):
        fake = {'stats': {'updatedCount': 3}, 'errors': []}
        with patch('games.views.update_hot_scores', return_value=fake):
            response = api_client.post(
                '/api/batch/update-hot-scores/', HTTP_AUTHORIZATION='Bearer test-batch-secret'
            )
        assert response.status_code == 200
        assert response.data == {'success': True, 'stats': {'updatedCount': 3}, 'errors': []}

    def test_status(self, api_client, make_game):
        make_game('Hot', hot_score=0.8)
        make_game('Cold')

        response = api_client.get('/api/batch/update-hot-scores/')
        assert response.data['totalHotGames'] == 1
        assert response.data['topHotGames'][0]['title'] == 'Hot'

    def test_update_tags_requires_secret(self, api_client):
        assert api_client.post('/api/batch/update-tags/').status_code == 401

        with patch('games.views.update_tags', return_value={'message': 'ok', 'updated': 0, 'failed': 0}):
            response = api_client.post('/api/batch/update-tags/', HTTP_AUTHORIZATION='Bearer test-batch-secret')
        assert response.data['success'] is True


@pytest.mark.django_db
def test_update_commands_report(make_game):
    stats = {
        'topSellersCount': 1, 'mostPlayedCount': 0, 'uniqueGames': 1,
        'updatedCount': 1, 'createdCount': 0, 'decayedCount': 0, 'errors': 1,
    }
    out = StringIO()
    with patch('games.management.commands.update_hot_scores.update_hot_scores',
               return_value={'stats': stats, 'errors': ['App 1: boom']}) as update:
        call_command('update_hot_scores', '--delay', '0', stdout=out)
    update.assert_called_once_with(delay=0.0)
    assert 'App 1: boom' in out.getvalue()

    out = StringIO()
    with patch('games.management.commands.update_tags.update_tags',
               return_value={'message': 'ok', 'updated': 4, 'failed': 0}):
        call_command('update_tags', '--limit', '5', stdout=out)
    assert '태그 저장: 4개' in out.getvalue()
