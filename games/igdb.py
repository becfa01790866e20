"""
IGDB (Internet Game Database) API Client
Twitch Client ID / Client Secret 필요 (IGDB_CLIENT_ID, IGDB_CLIENT_SECRET)
"""
import logging
import re
import time
from datetime import datetime, timezone as dt_timezone

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

TOKEN_URL = "https://id.twitch.tv/oauth2/token"
BASE_URL = "https://api.igdb.com/v4"

GAME_FIELDS = (
    "name, cover.url, first_release_date, summary, genres.name, platforms.name, "
    "rating, rating_count, aggregated_rating, alternative_names.name, alternative_names.comment, "
    "websites.url, websites.category, category"
)

DETAIL_FIELDS = (
    "name, cover.url, first_release_date, summary, storyline, genres.name, platforms.name, "
    "involved_companies.company.name, involved_companies.developer, involved_companies.publisher, "
    "rating, rating_count, aggregated_rating, screenshots.url, videos.video_id, videos.name, "
    "websites.url, websites.category, alternative_names.name, alternative_names.comment"
)

# DLC, 에디션, 확장팩 키워드 목록
EXCLUDE_KEYWORDS = [
    'DLC',
    'Expansion',
    'Season Pass',
    'Game of the Year',
    'GOTY',
    'Complete Edition',
    'Definitive Edition',
    'Deluxe Edition',
    "Collector's Edition",
    'Premium Edition',
    'Ultimate Edition',
    'Enhanced Edition',
    'Remastered',
    'Redux',
    'Blood and Wine',
    'Hearts of Stone',
    'The Old Hunters',
    'Ashes of Ariandel',
    'The Ringed City',
]

# OST, 특별 콘텐츠를 나타내는 패턴
SPECIAL_CONTENT_PATTERNS = [
    re.compile(r': (As|Original|Soundtrack|OST|Theme|Music)', re.IGNORECASE),
    re.compile(r'\(OST\)', re.IGNORECASE),
    re.compile(r'\(Soundtrack\)', re.IGNORECASE),
    re.compile(r': (The |A )[A-Z][^:]+$'),
]

KOREAN_NAME_COMMENTS = {'kr', 'korean', 'ko'}

# 6개월 (초)
RECENT_WINDOW_SECONDS = 6 * 30 * 24 * 60 * 60

_token_cache = {'token': None, 'expires_at': 0}


class IGDBConfigError(RuntimeError):
    """IGDB 인증 정보가 설정되지 않음"""


def get_access_token():
    """
    Twitch client credentials 토큰 (만료 1분 전까지 캐시)
    """
    if _token_cache['token'] and _token_cache['expires_at'] > time.time():
        return _token_cache['token']

    client_id = settings.IGDB_CLIENT_ID
    client_secret = settings.IGDB_CLIENT_SECRET
    if not client_id or not client_secret:
        raise IGDBConfigError('IGDB_CLIENT_ID and IGDB_CLIENT_SECRET must be set')

    response = requests.post(
        TOKEN_URL,
        params={
            'client_id': client_id,
            'client_secret': client_secret,
            'grant_type': 'client_credentials',
        },
        timeout=10,
    )
    response.raise_for_status()
    data = response.json()

    _token_cache['token'] = data['access_token']
    _token_cache['expires_at'] = time.time() + data.get('expires_in', 0) - 60
    return _token_cache['token']


def reset_token_cache():
    _token_cache['token'] = None
    _token_cache['expires_at'] = 0


def igdb_request(endpoint, body):
    """
    IGDB API 요청 (Apicalypse 쿼리 본문)

    네트워크/HTTP 오류는 로그를 남기고 빈 리스트를 반환합니다.
    """
    try:
        token = get_access_token()
        response = requests.post(
            f"{BASE_URL}/{endpoint}",
            headers={
                'Client-ID': settings.IGDB_CLIENT_ID,
                'Authorization': f'Bearer {token}',
                'Content-Type': 'text/plain',
            },
            data=body.encode('utf-8'),
            timeout=15,
        )
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        logger.error(f"IGDB API error ({endpoint}): {e}")
        return []


def filter_main_games_only(games):
    """DLC, 에디션, OST, 이벤트성 콘텐츠 제외"""
    result = []
    for game in games:
        name = game.get('name', '')

        # DLC는 보통 "게임 - DLC 이름" 형식
        if ' - ' in name:
            continue

        if any(keyword in name for keyword in EXCLUDE_KEYWORDS):
            continue

        if any(pattern.search(name) for pattern in SPECIAL_CONTENT_PATTERNS):
            continue

        # 콜론 뒤 부제목이 4단어 이상이면 이벤트/업데이트로 간주
        parts = name.split(':')
        if len(parts) == 2 and len(parts[1].split()) >= 4:
            continue

        result.append(game)
    return result


def _genre_filter(genres):
    if not genres:
        return ''
    names = ','.join(f'"{g}"' for g in genres)
    return f' & genres.name = ({names})'


def _escape(query):
    return query.replace('\\', '\\\\').replace('"', '\\"')


def search_games(query, limit=50):
    """이름 부분 문자열 검색 (대소문자 무시)"""
    body = f'fields {GAME_FIELDS}; where name ~ *"{_escape(query)}"*; limit {limit};'
    return igdb_request('games', body)


def get_game_by_id(igdb_id):
    body = f'fields {DETAIL_FIELDS}; where id = {int(igdb_id)};'
    games = igdb_request('games', body)
    return games[0] if games else None


def get_popular_games(limit=20, offset=0, genres=None):
    """
    평점 순 인기 게임 (rating_count > 100)

    필터링 후에도 충분하도록 limit 의 10배 (최대 500) 를 가져옵니다.
    """
    fetch_limit = min(limit * 10, 500)
    body = (
        f'fields {GAME_FIELDS}; '
        f'where rating_count > 100{_genre_filter(genres)}; '
        f'sort rating desc; limit {fetch_limit}; offset {offset};'
    )
    games = igdb_request('games', body)
    return filter_main_games_only(games)[:limit]


def get_recent_games(limit=20, offset=0, genres=None):
    """최근 6개월 내 출시 게임"""
    now = int(time.time())
    since = now - RECENT_WINDOW_SECONDS
    fetch_limit = min(limit * 10, 500)
    body = (
        f'fields {GAME_FIELDS}; '
        f'where first_release_date >= {since} & first_release_date <= {now}{_genre_filter(genres)}; '
        f'sort first_release_date desc; limit {fetch_limit}; offset {offset};'
    )
    games = igdb_request('games', body)
    return filter_main_games_only(games)[:limit]


def search_game_by_steam_id(steam_appid):
    """Steam 스토어 URL 로 IGDB 게임 ID 찾기"""
    body = f'fields game; where url ~ *"store.steampowered.com/app/{int(steam_appid)}"*; limit 1;'
    websites = igdb_request('websites', body)
    if websites and websites[0].get('game'):
        return websites[0]['game']
    return None


def get_image_url(url, size='cover_big'):
    """
    IGDB 이미지 URL 변환

    IGDB 는 "//images.igdb.com/igdb/image/upload/t_thumb/..." 형식을 반환합니다.
    """
    if not url:
        return None
    if url.startswith('//'):
        url = f'https:{url}'
    return url.replace('t_thumb', f't_{size}')


def get_korean_title(igdb_game):
    """alternative_names 에서 한국어 이름 찾기"""
    for alt in igdb_game.get('alternative_names') or []:
        comment = (alt.get('comment') or '').lower()
        if comment in KOREAN_NAME_COMMENTS:
            return alt.get('name')
    return None


def convert_igdb_game(igdb_game, metacritic_score=None):
    """IGDB 응답 → Game 모델 필드 dict"""
    companies = igdb_game.get('involved_companies') or []
    developers = [c['company']['name'] for c in companies if c.get('developer') and c.get('company')]
    publishers = [c['company']['name'] for c in companies if c.get('publisher') and c.get('company')]

    if metacritic_score is None and igdb_game.get('aggregated_rating'):
        metacritic_score = round(igdb_game['aggregated_rating'])

    release = igdb_game.get('first_release_date')
    cover = igdb_game.get('cover') or {}

    return {
        'igdb_id': igdb_game['id'],
        'title': get_korean_title(igdb_game) or igdb_game.get('name', ''),
        'description': igdb_game.get('summary'),
        'cover_image': get_image_url(cover.get('url')),
        'release_date': datetime.fromtimestamp(release, tz=dt_timezone.utc) if release else None,
        'platforms': [p['name'] for p in igdb_game.get('platforms') or []],
        'genres': [g['name'] for g in igdb_game.get('genres') or []],
        'developer': developers[0] if developers else None,
        'publisher': publishers[0] if publishers else None,
        'metacritic_score': metacritic_score,
    }


def upsert_game_from_igdb(igdb_id):
    """
    IGDB 에서 게임 정보를 가져와 DB 에 저장 (이미 있으면 갱신)

    Returns:
        Game 또는 None (IGDB 에 없는 경우)
    """
    from .models import Game

    igdb_game = get_game_by_id(igdb_id)
    if not igdb_game:
        logger.warning(f"Game {igdb_id} not found in IGDB")
        return None

    data = convert_igdb_game(igdb_game)
    data.pop('igdb_id')
    game, created = Game.objects.update_or_create(igdb_id=igdb_id, defaults=data)
    if created:
        logger.info(f"Created game from IGDB: {game.title} ({igdb_id})")
    return game
