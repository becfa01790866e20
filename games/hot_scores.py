"""
Hot score / 태그 배치 작업

- Steam Top Sellers + Most Played 순위로 hot score 계산
- 24시간 이상 갱신되지 않은 게임은 10% 감소
- 리뷰가 있는데 태그가 없는 게임에 SteamSpy 태그 저장

API (/api/batch/...) 와 management command 양쪽에서 호출합니다.
"""
import logging
import re
import time
from datetime import timedelta

from django.db.models import Count, F, Q
from django.utils import timezone

from . import igdb, steam
from .models import Game

logger = logging.getLogger(__name__)

# 순위 1위 = 1.0, RANK_DEPTH 위 = 1/RANK_DEPTH, 순위 밖 = 0
RANK_DEPTH = 100
TOP_SELLER_WEIGHT = 0.6
MOST_PLAYED_WEIGHT = 0.4

DECAY_FACTOR = 0.9
DECAY_AFTER = timedelta(hours=24)

MAX_REPORTED_ERRORS = 10
TAG_BATCH_SIZE = 50

TRADEMARK_RE = re.compile(r'[™®©]')


def _rank_component(rank):
    if not rank or rank < 1 or rank > RANK_DEPTH:
        return 0.0
    return (RANK_DEPTH + 1 - rank) / RANK_DEPTH


def calculate_hot_score(top_seller_rank=None, most_played_rank=None):
    """
    판매 순위와 동시접속 순위를 합친 인기 점수 (0 ~ 1)

    score = 0.6 * 판매 + 0.4 * 동시접속, 각 항목은 (N + 1 - rank) / N
    """
    score = (
        TOP_SELLER_WEIGHT * _rank_component(top_seller_rank)
        + MOST_PLAYED_WEIGHT * _rank_component(most_played_rank)
    )
    return round(score, 4)


def find_igdb_id_for_steam_app(steam_appid, steam_name=''):
    """
    Steam App ID → IGDB 게임 ID

    1. IGDB websites 의 Steam URL
    2. 이름 일치 (부분 포함)
    3. 이름 검색 첫 번째 결과
    """
    igdb_id = igdb.search_game_by_steam_id(steam_appid)
    if igdb_id:
        return igdb_id

    if not steam_name:
        return None

    normalized = TRADEMARK_RE.sub('', steam_name).replace(':', ' ').replace('：', ' ').strip()
    results = igdb.search_games(normalized, limit=10)
    search_name = normalized.lower()

    for game in results:
        igdb_name = TRADEMARK_RE.sub('', game.get('name', '').lower()).replace(':', '').replace('：', '').strip()
        if igdb_name == search_name or igdb_name in search_name or search_name in igdb_name:
            return game['id']

    if results:
        logger.warning(f"Using first IGDB result for {steam_name}: {results[0].get('name')}")
        return results[0]['id']
    return None


def _save_hot_game(igdb_id, steam_appid, steam_name, hot_score, now):
    """
    Returns:
        True 면 새로 생성
    """
    game = Game.objects.filter(igdb_id=igdb_id).first()

    if game is None or not game.cover_image:
        igdb_game = igdb.get_game_by_id(igdb_id)
        data = igdb.convert_igdb_game(igdb_game) if igdb_game else {}
        data.pop('igdb_id', None)
    else:
        data = {}

    if game is None:
        Game.objects.create(
            igdb_id=igdb_id,
            steam_appid=steam_appid,
            title=data.pop('title', None) or steam_name or f'Steam Game {steam_appid}',
            hot_score=hot_score,
            hot_score_updated_at=now,
            **data,
        )
        return True

    for field, value in data.items():
        setattr(game, field, value)
    game.hot_score = hot_score
    game.hot_score_updated_at = now
    if not game.steam_appid:
        game.steam_appid = steam_appid
    game.save()
    return False


def decay_stale_hot_scores(now=None):
    """24시간 이상 갱신되지 않은 hot score 10% 감소. 감소된 게임 수 반환"""
    now = now or timezone.now()
    threshold = now - DECAY_AFTER
    return Game.objects.filter(
        Q(hot_score_updated_at__isnull=True) | Q(hot_score_updated_at__lt=threshold),
        hot_score__gt=0,
    ).update(hot_score=F('hot_score') * DECAY_FACTOR)


def update_hot_scores(delay=0.1):
    """
    hot score 전체 갱신

    Returns:
        dict: 통계 (topSellersCount, mostPlayedCount, uniqueGames,
              updatedCount, createdCount, decayedCount, errors) 와 errors (최대 10개 메시지)
    """
    logger.info("Starting hot score update batch job")

    top_sellers = steam.get_top_sellers()
    most_played = steam.get_most_played()

    top_seller_ranks = {item['appId']: item['rank'] for item in top_sellers}
    most_played_ranks = {item['appId']: item['rank'] for item in most_played}
    steam_names = {item['appId']: item.get('name', '') for item in top_sellers}

    # 순서를 유지하며 중복 제거
    app_ids = list(dict.fromkeys(list(top_seller_ranks) + list(most_played_ranks)))

    updated = 0
    created = 0
    errors = []
    now = timezone.now()

    for app_id in app_ids:
        hot_score = calculate_hot_score(top_seller_ranks.get(app_id), most_played_ranks.get(app_id))
        if hot_score == 0:
            continue

        steam_name = steam_names.get(app_id, '')
        try:
            igdb_id = find_igdb_id_for_steam_app(app_id, steam_name)
            if not igdb_id:
                logger.info(f"IGDB game not found for Steam {app_id} ({steam_name})")
                continue

            if _save_hot_game(igdb_id, app_id, steam_name, hot_score, now):
                created += 1
            else:
                updated += 1
            logger.debug(f"Updated {steam_name or app_id}: hot_score={hot_score:.3f}")
        except Exception as e:
            message = f"Failed to process Steam {app_id}: {e}"
            logger.error(message)
            errors.append(message)

        if delay:
            time.sleep(delay)

    decayed = decay_stale_hot_scores(now)
    logger.info(f"Hot score batch done: updated={updated}, created={created}, decayed={decayed}")

    return {
        'stats': {
            'topSellersCount': len(top_sellers),
            'mostPlayedCount': len(most_played),
            'uniqueGames': len(app_ids),
            'updatedCount': updated,
            'createdCount': created,
            'decayedCount': decayed,
            'errors': len(errors),
        },
        'errors': errors[:MAX_REPORTED_ERRORS],
    }


def hot_score_status(limit=20):
    games = Game.objects.filter(hot_score__gt=0).order_by('-hot_score')
    return {
        'totalHotGames': games.count(),
        'topHotGames': [
            {
                'id': game.pk,
                'title': game.title,
                'igdbId': game.igdb_id,
                'hotScore': game.hot_score,
                'hotScoreUpdatedAt': game.hot_score_updated_at,
            }
            for game in games[:limit]
        ],
    }


def update_tags(limit=TAG_BATCH_SIZE, delay=1.0):
    """
    리뷰가 있는데 태그가 없는 게임(리뷰 많은 순 최대 limit 개)에 Steam 태그 저장

    IGDB 상세 → Steam App ID → SteamSpy 태그
    """
    games = (
        Game.objects.filter(tags__isnull=True, igdb_id__isnull=False)
        .annotate(review_count=Count('reviews'))
        .filter(review_count__gt=0)
        .order_by('-review_count')[:limit]
    )

    updated = 0
    failed = 0
    for game in games:
        try:
            steam_appid = game.steam_appid
            if not steam_appid:
                igdb_game = igdb.get_game_by_id(game.igdb_id)
                steam_appid = steam.extract_steam_id(igdb_game) if igdb_game else None
            if not steam_appid:
                logger.info(f"No Steam ID for {game.title}")
                failed += 1
                continue

            tags = steam.get_steam_tags(steam_appid)
            if not tags:
                logger.info(f"No SteamSpy tags for {game.title}")
                failed += 1
                continue

            game.tags = tags
            game.steam_appid = steam_appid
            game.save(update_fields=['tags', 'steam_appid', 'updated_at'])
            updated += 1
        except Exception as e:
            logger.error(f"Error updating tags for {game.title}: {e}")
            failed += 1

        if delay:
            time.sleep(delay)

    return {
        'message': f'Updated {updated} games, {failed} failed',
        'updated': updated,
        'failed': failed,
    }
