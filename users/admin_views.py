"""
사이트 관리자 API (유저 등급/아이디 관리, 리뷰 관리)
"""
import logging

from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from reviews.models import Review
from reviews.serializers import ReviewWithGameSerializer
from reviews.services import delete_review

from .permissions import IsSiteAdmin
from .serializers import AdminUserSerializer
from .user_views import delete_user_and_refresh_stats, username_in_use

logger = logging.getLogger(__name__)

User = get_user_model()

ADMIN_REVIEW_LIMIT = 100
ASSIGNABLE_ROLES = [choice for choice, _ in User.ROLE_CHOICES]


def _user_id(request):
    value = request.data.get('userId')
    return int(value) if str(value or '').isdigit() else None


# 1. 유저 목록 (?search=)
@api_view(['GET'])
@permission_classes([IsSiteAdmin])
def user_list(request):
    users = User.objects.annotate(review_count=Count('reviews')).order_by('-date_joined')
    search = request.GET.get('search', '').strip()
    if search:
        users = users.filter(
            Q(username__icontains=search) | Q(email__icontains=search) | Q(name__icontains=search)
        )
    return Response({'users': AdminUserSerializer(users, many=True).data})


# 2. 등급 변경 (user / expert / influencer)
@api_view(['POST'])
@permission_classes([IsSiteAdmin])
def update_role(request):
    user_id = _user_id(request)
    role = request.data.get('role')
    if user_id is None or not role:
        return Response({'detail': '필수 항목이 누락되었습니다.'}, status=status.HTTP_400_BAD_REQUEST)
    if role not in ASSIGNABLE_ROLES:
        return Response({'detail': '잘못된 등급입니다.'}, status=status.HTTP_400_BAD_REQUEST)

    user = get_object_or_404(User, pk=user_id)
    user.role = role
    user.save(update_fields=['role'])
    logger.info(f"Admin {request.user.username} set role of {user.username} to {role}")

    return Response({
        'success': True,
        'user': {'id': user.pk, 'email': user.email, 'name': user.name, 'role': user.role},
    })


# 3. 아이디 변경
@api_view(['POST'])
@permission_classes([IsSiteAdmin])
def update_username(request):
    user_id = _user_id(request)
    username = (request.data.get('username') or '').strip()
    if user_id is None or not username:
        return Response({'detail': '유저 ID와 아이디가 필요합니다.'}, status=status.HTTP_400_BAD_REQUEST)
    if len(username) < 3 or len(username) > 20:
        return Response({'detail': '아이디는 3-20자 사이여야 합니다.'}, status=status.HTTP_400_BAD_REQUEST)

    user = get_object_or_404(User, pk=user_id)
    if username_in_use(username, user):
        return Response({'detail': '이미 사용 중인 아이디입니다.'}, status=status.HTTP_400_BAD_REQUEST)

    user.username = username
    user.save(update_fields=['username'])
    return Response({'success': True, 'user': {'id': user.pk, 'username': user.username}})


# 4. 유저 삭제 (본인 제외)
@api_view(['DELETE'])
@permission_classes([IsSiteAdmin])
def delete_user(request):
    user_id = _user_id(request)
    if user_id is None:
        return Response({'detail': '유저 ID가 필요합니다.'}, status=status.HTTP_400_BAD_REQUEST)

    user = get_object_or_404(User, pk=user_id)
    if user.pk == request.user.pk:
        return Response({'detail': '본인 계정은 삭제할 수 없습니다.'}, status=status.HTTP_400_BAD_REQUEST)

    username = user.username
    delete_user_and_refresh_stats(user)
    logger.info(f"Admin {request.user.username} deleted user {username}")
    return Response({'success': True})


# 5. 최근 리뷰 목록
@api_view(['GET'])
@permission_classes([IsSiteAdmin])
def review_list(request):
    reviews = Review.objects.select_related('user', 'game').order_by('-created_at')[:ADMIN_REVIEW_LIMIT]
    return Response({'reviews': ReviewWithGameSerializer(reviews, many=True).data})


# 6. 리뷰 삭제
@api_view(['DELETE'])
@permission_classes([IsSiteAdmin])
def review_delete(request):
    review_id = request.data.get('reviewId')
    if not str(review_id or '').isdigit():
        return Response({'detail': '리뷰 ID가 필요합니다.'}, status=status.HTTP_400_BAD_REQUEST)

    review = get_object_or_404(Review, pk=int(review_id))
    delete_review(review)
    logger.info(f"Admin {request.user.username} deleted review #{review_id}")
    return Response({'success': True, 'detail': '리뷰가 삭제되었습니다.'})
