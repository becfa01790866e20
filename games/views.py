"""
games 앱의 REST API Views

- IGDB 목록/검색 + DB 평점 통계 병합
- Steam 인기도(hot score) 기반 목록
- 게임 상세 (DB 에 없으면 IGDB 에서 가져와 저장)
- 유사 게임, 개인화 추천
- 배치 작업 엔드포인트 (BATCH_SECRET)
"""
import logging

from django.conf import settings
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from reviews.models import Review
from reviews.rating import calculate_bayesian_average, get_rating_label
from reviews.serializers import ReviewSerializer
from reviews.services import game_statistics, get_user_votes, visible_reviews

from . import igdb
from .hot_scores import hot_score_status, update_hot_scores, update_tags
from .models import Game, GameSimilarity
from .recommendations import get_recommended_games_for_user
from .translations import translate_genres, translate_platforms

logger = logging.getLogger(__name__)

DETAIL_REVIEW_COUNT = 5


def _int_param(request, name, default):
    try:
        return max(int(request.GET.get(name, default)), 0)
    except (TypeError, ValueError):
        return default


def _igdb_unavailable(e):
    logger.error(f"IGDB not configured: {e}")
    return Response(
        {'games': [], 'hasMore': False, 'error': 'IGDB 설정이 필요합니다.'},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


def _merge_db_stats(igdb_games):
    """IGDB 게임 목록 → 카드 dict (DB 평균 평점 / 리뷰 수 병합, 한 번의 쿼리)"""
    igdb_ids = [g['id'] for g in igdb_games]
    stats = {
        row['igdb_id']: row
        for row in Game.objects.filter(igdb_id__in=igdb_ids).values('igdb_id', 'average_rating', 'total_reviews')
    }

    result = []
    for igdb_game in igdb_games:
        converted = igdb.convert_igdb_game(igdb_game)
        row = stats.get(igdb_game['id'], {})
        result.append({
            'id': igdb_game['id'],
            'title': converted['title'],
            'description': converted['description'],
            'coverImage': converted['cover_image'],
            'releaseDate': converted['release_date'].isoformat() if converted['release_date'] else None,
            'platforms': converted['platforms'],
            'platformsKo': translate_platforms(converted['platforms']),
            'genres': converted['genres'],
            'genresKo': translate_genres(converted['genres']),
            'developer': converted['developer'],
            'publisher': converted['publisher'],
            'metacriticScore': converted['metacritic_score'],
            'averageRating': row.get('average_rating') or 0,
            'totalReviews': row.get('total_reviews') or 0,
        })
    return result


# 1. 게임 목록 (type=popular|recent, IGDB)
@api_view(['GET'])
@permission_classes([AllowAny])
def game_list(request):
    list_type = request.GET.get('type', 'popular')
    offset = _int_param(request, 'offset', 0)
    limit = _int_param(request, 'limit', 25) or 25
    genres_param = request.GET.get('genres')
    genres = [g for g in genres_param.split(',') if g] if genres_param else None

    try:
        if list_type == 'recent':
            igdb_games = igdb.get_recent_games(limit, offset, genres)
        else:
            igdb_games = igdb.get_popular_games(limit, offset, genres)
    except igdb.IGDBConfigError as e:
        return _igdb_unavailable(e)

    games = _merge_db_stats(igdb_games)
    logger.info(f"Game list: type={list_type}, offset={offset}, returned={len(games)}")
    return Response({'games': games, 'hasMore': len(games) == limit})


# 2. 지금 뜨는 게임 (Steam hot score)
@api_view(['GET'])
@permission_classes([AllowAny])
def hot_games(request):
    offset = _int_param(request, 'offset', 0)
    limit = _int_param(request, 'limit', 25) or 25

    queryset = Game.objects.filter(hot_score__gt=0, igdb_id__isnull=False).order_by('-hot_score', 'id')
    total = queryset.count()

    games = []
    for game in queryset[offset:offset + limit]:
        card = game.to_card()
        card['hotScore'] = game.hot_score
        card['isHot'] = True
        games.append(card)

    return Response({'games': games, 'hasMore': offset + limit < total, 'total': total})


# 3. 인기 게임 (로그인 시 이미 평가한 게임 제외)
@api_view(['GET'])
@permission_classes([AllowAny])
def popular_games(request):
    offset = _int_param(request, 'offset', 0)
    limit = _int_param(request, 'limit', 20) or 20

    rated_ids = set()
    if request.user.is_authenticated:
        rated_ids = set(
            Review.objects.filter(user=request.user, game__igdb_id__isnull=False)
            .values_list('game__igdb_id', flat=True)
        )

    fetch_limit = limit * 2 if rated_ids else limit
    try:
        igdb_games = igdb.get_popular_games(fetch_limit, offset)
    except igdb.IGDBConfigError as e:
        return _igdb_unavailable(e)

    igdb_games = [g for g in igdb_games if g['id'] not in rated_ids][:limit]
    return Response({'games': _merge_db_stats(igdb_games)})


# 4. 게임 검색 (?q=)
@api_view(['GET'])
@permission_classes([AllowAny])
def game_search(request):
    query = request.GET.get('q', '').strip()
    if not query:
        return Response({'detail': '검색어(q)가 필요합니다.'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        igdb_games = igdb.search_games(query, 50)
    except igdb.IGDBConfigError as e:
        return _igdb_unavailable(e)

    # 본편만, 평가 수가 있는 게임만, 평가 수 많은 순
    main_games = igdb.filter_main_games_only(igdb_games)
    rated_games = [g for g in main_games if g.get('rating_count')]
    rated_games.sort(key=lambda g: g.get('rating_count', 0), reverse=True)

    logger.info(f"Search '{query}': {len(igdb_games)} → {len(main_games)} → {len(rated_games)}")
    return Response({'games': _merge_db_stats(rated_games)})


def _game_detail_payload(game):
    reviews = list(Review.objects.filter(game=game))
    payload = game.to_card()
    payload.update({
        'description': game.description,
        'developer': game.developer,
        'publisher': game.publisher,
        'metacriticScore': game.metacritic_score,
        'tags': game.tags or [],
        'steamAppId': game.steam_appid,
        'verifiedReviews': game.verified_reviews,
        'hotScore': game.hot_score,
        'label': get_rating_label(game.average_rating) if reviews else None,
        'bayesianRating': round(calculate_bayesian_average(reviews), 2),
    })
    return payload


# 5. 게임 상세 (IGDB ID)
@api_view(['GET'])
@permission_classes([AllowAny])
def game_detail(request, igdb_id):
    game = Game.objects.filter(igdb_id=igdb_id).first()
    if game is None:
        try:
            game = igdb.upsert_game_from_igdb(igdb_id)
        except igdb.IGDBConfigError as e:
            logger.error(f"IGDB not configured: {e}")
            return Response({'detail': 'IGDB 설정이 필요합니다.'}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        if game is None:
            return Response({'detail': '게임을 찾을 수 없습니다.'}, status=status.HTTP_404_NOT_FOUND)

    recent_reviews = list(
        visible_reviews(Review.objects.filter(game=game), request.user)
        .select_related('user')
        .order_by('-created_at', '-id')[:DETAIL_REVIEW_COUNT]
    )
    votes = get_user_votes(request.user, recent_reviews)

    user_review = None
    if request.user.is_authenticated:
        mine = Review.objects.filter(game=game, user=request.user).select_related('user').first()
        if mine is not None:
            user_review = ReviewSerializer(mine, context={'votes': votes}).data

    return Response({
        'game': _game_detail_payload(game),
        'reviews': ReviewSerializer(recent_reviews, many=True, context={'votes': votes}).data,
        'statistics': game_statistics(game),
        'userReview': user_review,
    })


# 6. 유사 게임 (미리 계산된 GameSimilarity)
@api_view(['GET'])
@permission_classes([AllowAny])
def similar_games(request, igdb_id):
    game = get_object_or_404(Game, igdb_id=igdb_id)
    limit = _int_param(request, 'limit', 10) or 10

    similar = GameSimilarity.get_similar_games(game.pk, limit=limit)
    games_by_id = Game.objects.in_bulk([game_id for game_id, _ in similar])

    games = []
    for game_id, score in similar:
        other = games_by_id.get(game_id)
        if other is None or other.igdb_id is None:
            continue
        card = other.to_card()
        card['similarity'] = round(score, 4)
        games.append(card)
    return Response({'games': games})


# 7. 맞춤 추천
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def recommended_games(request):
    limit = _int_param(request, 'limit', 10) or 10
    result = get_recommended_games_for_user(request.user, limit=limit)
    if 'error' in result:
        return Response(result, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(result)


def _has_batch_secret(request):
    header = request.headers.get('Authorization', '')
    provided = header[len('Bearer '):] if header.startswith('Bearer ') else None
    return provided is not None and provided == settings.BATCH_SECRET


# 8. 배치: hot score 갱신 (POST) / 상태 조회 (GET)
# Authorization 헤더를 JWT 로 해석하지 않도록 인증 클래스를 비웁니다.
@api_view(['GET', 'POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def batch_update_hot_scores(request):
    if request.method == 'GET':
        return Response(hot_score_status())

    if not _has_batch_secret(request):
        return Response({'detail': 'Unauthorized'}, status=status.HTTP_401_UNAUTHORIZED)

    result = update_hot_scores()
    return Response({'success': True, **result})


# 9. 배치: 리뷰된 게임 태그 갱신
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def batch_update_tags(request):
    if not _has_batch_secret(request):
        return Response({'detail': 'Unauthorized'}, status=status.HTTP_401_UNAUTHORIZED)

    result = update_tags()
    return Response({'success': True, **result})
