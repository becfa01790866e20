"""
Steam Store / Web API / SteamSpy 클라이언트

- Top Sellers, Most Played 순위 (hot score 계산용)
- SteamSpy 유저 태그
"""
import logging
import re

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

FEATURED_CATEGORIES_URL = "https://store.steampowered.com/api/featuredcategories"
MOST_PLAYED_URL = "https://api.steampowered.com/ISteamChartsService/GetMostPlayedGames/v1/"
STEAMSPY_URL = "https://steamspy.com/api.php"

HEADERS = {'User-Agent': 'GAMPFIRE/1.0'}

STEAM_APP_URL_RE = re.compile(r'/app/(\d+)')


def get_top_sellers(country='KR'):
    """
    Steam 최고 판매 순위

    Returns:
        list: [{'appId': int, 'name': str, 'rank': int}, ...] (rank 는 1부터)
    """
    try:
        response = requests.get(
            FEATURED_CATEGORIES_URL,
            params={'cc': country, 'l': 'koreana'},
            headers=HEADERS,
            timeout=10,
        )
        response.raise_for_status()
        items = response.json().get('top_sellers', {}).get('items', [])
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Failed to fetch Steam top sellers: {e}")
        return []

    result = []
    seen = set()
    for item in items:
        app_id = item.get('id')
        if not app_id or app_id in seen:
            continue
        seen.add(app_id)
        result.append({'appId': app_id, 'name': item.get('name', ''), 'rank': len(result) + 1})
    return result


def get_most_played():
    """
    Steam 동시 접속자 순위

    Returns:
        list: [{'appId': int, 'rank': int}, ...]
    """
    params = {}
    if settings.STEAM_API_KEY:
        params['key'] = settings.STEAM_API_KEY
    try:
        response = requests.get(MOST_PLAYED_URL, params=params, headers=HEADERS, timeout=10)
        response.raise_for_status()
        ranks = response.json().get('response', {}).get('ranks', [])
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Failed to fetch Steam most played: {e}")
        return []

    return [{'appId': r['appid'], 'rank': r['rank']} for r in ranks if r.get('appid')]


def get_steam_tags(steam_appid, limit=10):
    """
    SteamSpy 유저 태그 (득표순 상위 limit 개)

    Returns:
        list 또는 None
    """
    try:
        response = requests.get(
            STEAMSPY_URL,
            params={'request': 'appdetails', 'appid': steam_appid},
            headers=HEADERS,
            timeout=5,
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Failed to fetch Steam tags for {steam_appid}: {e}")
        return None

    tags = data.get('tags') if isinstance(data, dict) else None
    if not tags or not isinstance(tags, dict):
        return None

    ordered = sorted(tags.items(), key=lambda item: item[1], reverse=True)
    return [name for name, _ in ordered[:limit]]


def extract_steam_id(igdb_game):
    """IGDB websites 중 Steam 스토어 URL 에서 App ID 추출"""
    for website in igdb_game.get('websites') or []:
        url = website.get('url') or ''
        if 'store.steampowered.com/app/' in url:
            match = STEAM_APP_URL_RE.search(url)
            if match:
                return int(match.group(1))
    return None
