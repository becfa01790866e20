"""
개인화 게임 추천 엔진

1. 협업 필터링 (User-Based): 평점 패턴이 비슷한 유저가 높게 평가한 게임 (60%)
2. 콘텐츠 기반: 선호 태그/장르가 겹치는 DB 게임 (나머지)
3. IGDB 인기 게임으로 부족분 보충 (비선호 장르 제외)
"""
import logging
import math

import numpy as np
import pandas as pd

from reviews.models import Review

from . import igdb
from .models import Game

logger = logging.getLogger(__name__)

MIN_COMMON_GAMES = 3
MAX_SIMILAR_USERS = 20
MIN_CANDIDATE_RATING = 3.5
MIN_SUPPORTING_REVIEWS = 2
COLLABORATIVE_SHARE = 0.6
TOP_GENRES = 3
TOP_TAGS = 5
CONTENT_CANDIDATE_FACTOR = 3


def rating_weight(rating):
    """선호도 가중치: 4점 이상 2, 3점 이상 1, 2.5점 이상 0, 그 외 -1"""
    if rating >= 4:
        return 2
    if rating >= 3:
        return 1
    if rating >= 2.5:
        return 0
    return -1


def analyze_preferences(reviews):
    """
    평가한 게임의 장르/태그 선호도 분석

    Returns:
        (top_genres, top_tags, disliked_genres)
    """
    genre_scores = {}
    tag_scores = {}
    for review in reviews:
        weight = rating_weight(review.rating)
        for genre in review.game.genres or []:
            genre_scores[genre] = genre_scores.get(genre, 0) + weight
        for tag in review.game.tags or []:
            tag_scores[tag] = tag_scores.get(tag, 0) + weight

    def top_positive(scores, n):
        positive = [(name, score) for name, score in scores.items() if score > 0]
        positive.sort(key=lambda item: item[1], reverse=True)
        return [name for name, _ in positive[:n]]

    top_genres = top_positive(genre_scores, TOP_GENRES)
    top_tags = top_positive(tag_scores, TOP_TAGS)
    disliked_genres = [genre for genre, score in genre_scores.items() if score < 0]
    return top_genres, top_tags, disliked_genres


def find_similar_users(user, reviews):
    """
    평점 패턴이 비슷한 유저 찾기

    공통 평가 게임이 3개 이상인 유저에 대해
        rmsd = sqrt(mean((내 평점 - 상대 평점)^2))
        score = 1 / (1 + rmsd) * ln(공통 게임 수 + 1)

    Returns:
        pd.DataFrame: index=user_id, columns=[score, common_games] (score 내림차순, 최대 20명)
    """
    empty = pd.DataFrame(columns=['score', 'common_games'])
    my_ratings = pd.Series({r.game_id: r.rating for r in reviews}, dtype=float)
    if my_ratings.empty:
        return empty

    others = pd.DataFrame(list(
        Review.objects.filter(game_id__in=my_ratings.index.tolist())
        .exclude(user=user)
        .values('user_id', 'game_id', 'rating')
    ))
    if others.empty:
        return empty

    others['diff_sq'] = (others['rating'] - others['game_id'].map(my_ratings)) ** 2
    grouped = others.groupby('user_id').agg(
        common_games=('game_id', 'size'),
        msd=('diff_sq', 'mean'),
    )
    grouped = grouped[grouped['common_games'] >= MIN_COMMON_GAMES]
    if grouped.empty:
        return empty

    rmsd = np.sqrt(grouped['msd'])
    grouped['score'] = 1 / (1 + rmsd) * np.log(grouped['common_games'] + 1)
    return grouped[['score', 'common_games']].sort_values('score', ascending=False).head(MAX_SIMILAR_USERS)


def collaborative_recommendations(similar_users, reviewed_game_ids, limit):
    """
    유사 유저가 3.5점 이상 준 (내가 평가하지 않은) 게임

    각 리뷰의 기여도 = 유사도 * (rating - 2.5) / 2.5
    2명 이상이 추천한 게임만 점수순으로 반환

    Returns:
        list: [(Game, score, review_count), ...]
    """
    if similar_users.empty or limit <= 0:
        return []

    candidates = pd.DataFrame(list(
        Review.objects.filter(
            user_id__in=similar_users.index.tolist(),
            rating__gte=MIN_CANDIDATE_RATING,
        )
        .exclude(game_id__in=reviewed_game_ids)
        .values('user_id', 'game_id', 'rating')
    ))
    if candidates.empty:
        return []

    candidates['contribution'] = (
        candidates['user_id'].map(similar_users['score']) * (candidates['rating'] - 2.5) / 2.5
    )
    scores = candidates.groupby('game_id').agg(
        score=('contribution', 'sum'),
        review_count=('user_id', 'size'),
    )
    scores = scores[scores['review_count'] >= MIN_SUPPORTING_REVIEWS]
    scores = scores.sort_values('score', ascending=False).head(limit)

    games = Game.objects.in_bulk(scores.index.tolist())
    return [
        (games[game_id], float(row['score']), int(row['review_count']))
        for game_id, row in scores.iterrows()
        if game_id in games
    ]


def content_based_recommendations(top_genres, top_tags, disliked_genres, exclude_ids, limit):
    """
    태그가 있는 DB 게임 중 평균 평점 상위 limit*3 개를 후보로
    score = 태그 일치 수 * 2 + 장르 일치 수 (비선호 장르 포함 게임 제외)

    Returns:
        list: [(Game, score), ...]
    """
    if not top_tags or limit <= 0:
        return []

    candidates = (
        Game.objects.filter(tags__isnull=False)
        .exclude(pk__in=exclude_ids)
        .order_by('-average_rating')[:limit * CONTENT_CANDIDATE_FACTOR]
    )

    scored = []
    for game in candidates:
        game_genres = game.genres or []
        if any(genre in game_genres for genre in disliked_genres):
            continue
        game_tags = game.tags or []
        tag_matches = sum(1 for tag in top_tags if tag in game_tags)
        genre_matches = sum(1 for genre in top_genres if genre in game_genres)
        score = tag_matches * 2 + genre_matches
        if score > 0:
            scored.append((game, score))

    scored.sort(key=lambda item: item[1], reverse=True)
    return scored[:limit]


def _format_db_game(game, reason):
    return {
        'id': game.igdb_id,
        'title': game.title,
        'description': game.description,
        'coverImage': game.cover_image,
        'releaseDate': game.release_date.isoformat() if game.release_date else None,
        'platforms': game.platforms or [],
        'genres': game.genres or [],
        'tags': game.tags or [],
        'developer': game.developer,
        'publisher': game.publisher,
        'metacriticScore': game.metacritic_score,
        'averageRating': game.average_rating or 0,
        'totalReviews': game.total_reviews or 0,
        'recommendReason': reason,
    }


def _format_igdb_game(igdb_game, reason='popular'):
    converted = igdb.convert_igdb_game(igdb_game)
    return {
        'id': converted['igdb_id'],
        'title': converted['title'],
        'description': converted['description'],
        'coverImage': converted['cover_image'],
        'releaseDate': converted['release_date'].isoformat() if converted['release_date'] else None,
        'platforms': converted['platforms'],
        'genres': converted['genres'],
        'tags': [],
        'developer': converted['developer'],
        'publisher': converted['publisher'],
        'metacriticScore': converted['metacritic_score'],
        'averageRating': 0,
        'totalReviews': 0,
        'recommendReason': reason,
    }


def popular_games_response(limit):
    games = [_format_igdb_game(g) for g in igdb.get_popular_games(limit)]
    return {'games': games, 'hasMore': len(games) == limit}


def get_recommended_games_for_user(user, limit=10):
    """
    유저 맞춤 추천

    Returns:
        dict: games, hasMore, preferredGenres, preferredTags, similarUsersCount
              (실패 시 games=[], error)
    """
    try:
        reviews = list(Review.objects.filter(user=user).select_related('game'))
        logger.info(f"Recommending for {user.username}: {len(reviews)} reviews")

        if not reviews:
            return popular_games_response(limit)

        top_genres, top_tags, disliked_genres = analyze_preferences(reviews)
        if not top_genres:
            return popular_games_response(limit)

        reviewed_game_ids = {r.game_id for r in reviews}
        reviewed_igdb_ids = {r.game.igdb_id for r in reviews if r.game.igdb_id}

        similar_users = find_similar_users(user, reviews)
        collaborative = collaborative_recommendations(
            similar_users, reviewed_game_ids, math.ceil(limit * COLLABORATIVE_SHARE)
        )

        results = [_format_db_game(game, 'collaborative') for game, _, _ in collaborative]
        exclude_ids = reviewed_game_ids | {game.pk for game, _, _ in collaborative}

        content = content_based_recommendations(
            top_genres, top_tags, disliked_genres, exclude_ids, limit - len(results)
        )
        results.extend(_format_db_game(game, 'content-based') for game, _ in content)

        if len(results) < limit:
            needed = limit - len(results)
            existing_ids = {g['id'] for g in results} | reviewed_igdb_ids
            added = 0
            for igdb_game in igdb.get_popular_games(needed * 3, 0, top_genres):
                if added >= needed:
                    break
                if igdb_game.get('id') in existing_ids:
                    continue
                formatted = _format_igdb_game(igdb_game)
                if any(genre in formatted['genres'] for genre in disliked_genres):
                    logger.debug(f"Skipping {formatted['title']}: disliked genre")
                    continue
                results.append(formatted)
                existing_ids.add(formatted['id'])
                added += 1

        logger.info(
            f"Recommendations for {user.username}: {len(collaborative)} collaborative, "
            f"{len(content)} content-based, {len(results)} total"
        )

        return {
            'games': results[:limit],
            'hasMore': False,
            'preferredGenres': top_genres,
            'preferredTags': top_tags,
            'similarUsersCount': len(similar_users),
        }
    except Exception as e:
        logger.exception(f"Recommendation failed for {user.username}: {e}")
        return {'games': [], 'hasMore': False, 'error': 'Failed to fetch recommended games'}
