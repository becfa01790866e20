"""
마이페이지 / 프로필 / 팔로우 / 알림 API
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from games.models import Game
from reviews.serializers import ReviewWithGameSerializer
from reviews.services import get_user_votes, update_game_stats

from .models import Follow, Notification, PendingUser
from .serializers import (
    NotificationSerializer,
    PrivacyUpdateSerializer,
    ProfileUpdateSerializer,
    UserSummarySerializer,
    first_error,
)

logger = logging.getLogger(__name__)

User = get_user_model()

PROFILE_REVIEW_LIMIT = 50


def username_in_use(username, user):
    """다른 유저 또는 다른 이메일의 인증 대기 가입이 쓰고 있는 아이디인지"""
    if User.objects.filter(username=username).exclude(pk=user.pk).exists():
        return True
    return PendingUser.objects.filter(username=username).exclude(email=user.email).exists()


# 1. 프로필 수정 (이름, 사용자명)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    serializer = ProfileUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'detail': first_error(serializer.errors)}, status=status.HTTP_400_BAD_REQUEST)

    user = request.user
    name = serializer.validated_data['name']
    username = serializer.validated_data['username']

    if username != user.username and username_in_use(username, user):
        return Response({'detail': '이미 사용 중인 사용자명입니다'}, status=status.HTTP_400_BAD_REQUEST)

    user.name = name
    user.username = username
    user.save(update_fields=['name', 'username'])

    return Response({'success': True, 'user': {'name': user.name, 'username': user.username}})


# 2. 공개 범위 설정
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def update_privacy(request):
    serializer = PrivacyUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'detail': first_error(serializer.errors)}, status=status.HTTP_400_BAD_REQUEST)

    user = request.user
    user.profile_visibility = serializer.validated_data['profileVisibility']
    user.review_visibility = serializer.validated_data['reviewVisibility']
    user.save(update_fields=['profile_visibility', 'review_visibility'])

    return Response({
        'success': True,
        'profileVisibility': user.profile_visibility,
        'reviewVisibility': user.review_visibility,
    })


# 3. 팔로우 / 언팔로우 (Toggle)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def toggle_follow(request):
    target_id = request.data.get('targetUserId')
    if not str(target_id or '').isdigit():
        return Response({'detail': '대상 사용자 ID가 필요합니다.'}, status=status.HTTP_400_BAD_REQUEST)

    target = get_object_or_404(User, pk=target_id)
    if target.pk == request.user.pk:
        return Response({'detail': '자기 자신은 팔로우할 수 없습니다.'}, status=status.HTTP_400_BAD_REQUEST)

    existing = Follow.objects.filter(follower=request.user, following=target).first()
    if existing is not None:
        existing.delete()
        return Response({'following': False})

    with transaction.atomic():
        Follow.objects.create(follower=request.user, following=target)
        Notification.objects.create(
            user=target,
            type='FOLLOW',
            message=f'{request.user.name or request.user.email}님이 회원님을 팔로우했습니다',
            actor=request.user,
        )
    logger.info(f"Follow: {request.user.username} → {target.username}")
    return Response({'following': True})


# 4. 팔로워 / 팔로잉 목록
@api_view(['GET'])
@permission_classes([AllowAny])
def followers(request, username):
    user = get_object_or_404(User, username=username)
    follows = Follow.objects.filter(following=user).select_related('follower').order_by('-created_at')
    return Response({'users': UserSummarySerializer([f.follower for f in follows], many=True).data})


@api_view(['GET'])
@permission_classes([AllowAny])
def following(request, username):
    user = get_object_or_404(User, username=username)
    follows = Follow.objects.filter(follower=user).select_related('following').order_by('-created_at')
    return Response({'users': UserSummarySerializer([f.following for f in follows], many=True).data})


# 5. 공개 프로필
@api_view(['GET'])
@permission_classes([AllowAny])
def profile(request, username):
    """
    - 비공개 프로필은 본인만 상세 정보 조회
    - 리뷰 목록은 작성자의 review_visibility 를 따름
    """
    user = get_object_or_404(User, username=username)
    viewer = request.user
    is_owner = viewer.is_authenticated and viewer.pk == user.pk

    data = UserSummarySerializer(user).data
    data.update({
        'isOwner': is_owner,
        'isFollowing': user.is_followed_by(viewer),
        'profileVisibility': user.profile_visibility,
    })

    if user.profile_visibility == 'private' and not is_owner:
        return Response({'user': data, 'isPrivate': True, 'reviews': []})

    data.update({
        'reviewCount': user.reviews.count(),
        'followerCount': user.follower_set.count(),
        'followingCount': user.following_set.count(),
    })

    reviews = []
    reviews_hidden = not user.can_view_reviews_of(viewer)
    if not reviews_hidden:
        page = list(
            user.reviews.select_related('user', 'game').order_by('-created_at')[:PROFILE_REVIEW_LIMIT]
        )
        reviews = ReviewWithGameSerializer(
            page, many=True, context={'votes': get_user_votes(viewer, page)}
        ).data

    return Response({
        'user': data,
        'isPrivate': False,
        'reviewsHidden': reviews_hidden,
        'reviews': reviews,
    })


# 6. 알림
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notifications(request):
    queryset = request.user.notifications.select_related('actor', 'game')
    unread_count = queryset.filter(is_read=False).count()
    items = queryset[:50]
    return Response({
        'notifications': NotificationSerializer(items, many=True).data,
        'unreadCount': unread_count,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_notifications_read(request):
    """ids 를 넘기면 해당 알림만, 없으면 전체 읽음 처리"""
    queryset = request.user.notifications.filter(is_read=False)
    ids = request.data.get('ids')
    if isinstance(ids, list):
        queryset = queryset.filter(pk__in=ids)
    updated = queryset.update(is_read=True)
    return Response({'success': True, 'updated': updated})


# 7. 내 리뷰 개수
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def review_count(request):
    return Response({'count': request.user.reviews.count()})


def delete_user_and_refresh_stats(user):
    """유저 삭제 (리뷰 등은 CASCADE) 후 리뷰했던 게임들의 통계 재계산"""
    game_ids = set(user.reviews.values_list('game_id', flat=True))
    with transaction.atomic():
        user.delete()
        for game in Game.objects.filter(pk__in=game_ids):
            update_game_stats(game)
    return len(game_ids)


# 8. 회원 탈퇴
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def delete_account(request):
    username = request.user.username
    affected = delete_user_and_refresh_stats(request.user)
    logger.info(f"Account deleted: {username} ({affected} games recalculated)")
    return Response({'success': True})
