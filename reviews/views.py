"""
리뷰 / 온보딩 API
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from games.igdb import IGDBConfigError, upsert_game_from_igdb
from games.models import Game

from .models import Review
from .serializers import (
    OnboardingRatingSerializer,
    ReviewCreateSerializer,
    ReviewSerializer,
    ReviewWithGameSerializer,
    VoteSerializer,
)
from .services import (
    create_or_update_review,
    delete_review,
    get_user_votes,
    visible_reviews,
    vote_review,
)

logger = logging.getLogger(__name__)


def _int_param(request, name, default):
    try:
        return max(int(request.GET.get(name, default)), 0)
    except (TypeError, ValueError):
        return default


# 1. 리뷰 작성 / 수정 (게임당 하나)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def review_create(request):
    serializer = ReviewCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    game = get_object_or_404(Game, igdb_id=data['gameId'])

    review, created = create_or_update_review(
        request.user,
        game,
        data['rating'],
        comment=data.get('comment'),
        element_ratings=serializer.element_ratings(),
    )
    logger.info(f"Review {'created' if created else 'updated'}: {request.user.username} → {game.title}")

    return Response(
        {'success': True, 'created': created, 'review': ReviewSerializer(review).data},
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )


# 2. 내 리뷰 삭제 (?gameId=IGDB ID)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def review_delete(request):
    game_id = request.GET.get('gameId')
    if not game_id or not game_id.isdigit():
        return Response({'detail': '게임 ID가 필요합니다.'}, status=status.HTTP_400_BAD_REQUEST)

    review = get_object_or_404(Review, game__igdb_id=int(game_id), user=request.user)
    delete_review(review)
    return Response({'success': True, 'detail': '리뷰가 삭제되었습니다.'})


# 3. 리뷰 추천 / 비추천 (Toggle)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def review_vote(request, review_id):
    serializer = VoteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {'detail': 'type 은 "like" 또는 "dislike" 여야 합니다.'},
            status=status.HTTP_400_BAD_REQUEST,
        )

    review = get_object_or_404(Review, pk=review_id)
    vote_type, likes_count = vote_review(review, request.user, serializer.validated_data['type'])
    return Response({'success': True, 'type': vote_type, 'likesCount': likes_count})


# 4. 전체 리뷰 목록 (type=recent|top)
@api_view(['GET'])
@permission_classes([AllowAny])
def review_list(request):
    list_type = request.GET.get('type', 'recent')
    limit = _int_param(request, 'limit', 20)
    offset = _int_param(request, 'offset', 0)

    order = '-likes_count' if list_type == 'top' else '-created_at'
    reviews = visible_reviews(Review.objects.all(), request.user).select_related('user', 'game')
    total = reviews.count()
    page = list(reviews.order_by(order, '-id')[offset:offset + limit])

    serializer = ReviewWithGameSerializer(
        page, many=True, context={'votes': get_user_votes(request.user, page)}
    )
    return Response({
        'reviews': serializer.data,
        'hasMore': offset + limit < total,
        'total': total,
    })


# 5. 게임별 리뷰 (한줄평이 있는 리뷰만)
@api_view(['GET'])
@permission_classes([AllowAny])
def game_reviews(request, igdb_id):
    game = get_object_or_404(Game, igdb_id=igdb_id)
    page_number = _int_param(request, 'page', 1) or 1
    limit = _int_param(request, 'limit', 20) or 20
    offset = (page_number - 1) * limit

    reviews = visible_reviews(
        Review.objects.filter(game=game, comment__isnull=False).exclude(comment=''),
        request.user,
    ).select_related('user')
    total = reviews.count()
    page = list(reviews.order_by('-created_at', '-id')[offset:offset + limit])

    total_pages = (total + limit - 1) // limit
    serializer = ReviewSerializer(page, many=True, context={'votes': get_user_votes(request.user, page)})
    return Response({
        'reviews': serializer.data,
        'pagination': {
            'hasMore': page_number < total_pages,
            'currentPage': page_number,
            'totalPages': total_pages,
            'totalReviews': total,
        },
    })


def _get_or_fetch_game(igdb_id):
    game = Game.objects.filter(igdb_id=igdb_id).first()
    if game is not None:
        return game
    return upsert_game_from_igdb(igdb_id)


# 6. 온보딩 평점 일괄 저장 / 삭제
@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def onboarding_ratings(request):
    if request.method == 'DELETE':
        game_id = request.data.get('gameId')
        if not isinstance(game_id, int) or isinstance(game_id, bool):
            return Response({'detail': '게임 ID가 필요합니다.'}, status=status.HTTP_400_BAD_REQUEST)
        game = get_object_or_404(Game, igdb_id=game_id)
        review = Review.objects.filter(game=game, user=request.user).first()
        if review is not None:
            delete_review(review)
        return Response({'success': True, 'detail': '평가가 삭제되었습니다.'})

    ratings = request.data.get('ratings')
    if not isinstance(ratings, list) or not ratings:
        return Response({'detail': '평가 데이터가 올바르지 않습니다.'}, status=status.HTTP_400_BAD_REQUEST)

    saved = 0
    for item in ratings:
        serializer = OnboardingRatingSerializer(data=item)
        if not serializer.is_valid():
            continue

        igdb_id = serializer.validated_data['gameId']
        score = serializer.validated_data['rating']
        try:
            game = _get_or_fetch_game(igdb_id)
        except IGDBConfigError as e:
            logger.error(f"IGDB not configured: {e}")
            return Response({'detail': 'IGDB 설정이 필요합니다.'}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        if game is None:
            logger.warning(f"Onboarding: game {igdb_id} not found")
            continue

        # 온보딩에서는 한줄평 / 세부 평가 없음
        create_or_update_review(request.user, game, score, notify=False)
        saved += 1

    return Response({
        'success': True,
        'count': saved,
        'detail': f'{saved}개의 게임 평가가 저장되었습니다.',
    })
