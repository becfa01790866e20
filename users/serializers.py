"""
users 앱의 DRF Serializers
"""
import re

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Notification

User = get_user_model()

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
USERNAME_PATTERN = re.compile(r'^[a-z0-9_]+$')


class UserSerializer(serializers.ModelSerializer):
    """
    현재 사용자 정보 조회/수정용 Serializer (GET/PATCH /api/auth/me/)
    """
    profileVisibility = serializers.ChoiceField(
        source='profile_visibility', choices=User.PROFILE_VISIBILITY_CHOICES, required=False
    )
    reviewVisibility = serializers.ChoiceField(
        source='review_visibility', choices=User.REVIEW_VISIBILITY_CHOICES, required=False
    )
    steamId = serializers.CharField(source='steam_id', read_only=True)
    emailVerified = serializers.DateTimeField(source='email_verified', read_only=True)
    isAdmin = serializers.SerializerMethodField()
    reviewCount = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'name', 'image', 'role',
            'profileVisibility', 'reviewVisibility', 'steamId', 'emailVerified',
            'isAdmin', 'reviewCount',
        ]
        read_only_fields = ['id', 'username', 'email', 'role']

    def get_isAdmin(self, obj):
        return obj.is_site_admin()

    def get_reviewCount(self, obj):
        return obj.reviews.count()


class SignupSerializer(serializers.Serializer):
    """
    회원가입 입력 검증

    오류 메시지는 하나만 돌려주므로 validate() 에서 순서대로 확인합니다.
    """
    username = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    email = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)

    def validate(self, attrs):
        username = attrs.get('username', '')
        email = attrs.get('email', '')
        password = attrs.get('password', '')

        if not username or not email or not password:
            raise serializers.ValidationError('모든 필드를 입력해주세요.')
        if len(username) < 3 or len(username) > 20:
            raise serializers.ValidationError('아이디는 3-20자 사이여야 합니다.')
        if not EMAIL_PATTERN.match(email):
            raise serializers.ValidationError('올바른 이메일 형식이 아닙니다.')
        if len(password) < 8:
            raise serializers.ValidationError('비밀번호는 최소 8자 이상이어야 합니다.')
        return attrs


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True)
    username = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        name = (attrs.get('name') or '').strip()
        username = (attrs.get('username') or '').strip()

        if not name:
            raise serializers.ValidationError('이름을 입력해주세요')
        if not username:
            raise serializers.ValidationError('사용자명을 입력해주세요')
        if not USERNAME_PATTERN.match(username):
            raise serializers.ValidationError('사용자명은 영문 소문자, 숫자, 밑줄(_)만 사용 가능합니다')
        return {'name': name, 'username': username}


class PrivacyUpdateSerializer(serializers.Serializer):
    profileVisibility = serializers.ChoiceField(
        choices=User.PROFILE_VISIBILITY_CHOICES,
        error_messages={'invalid_choice': '잘못된 프로필 공개 범위입니다', 'required': '잘못된 프로필 공개 범위입니다'},
    )
    reviewVisibility = serializers.ChoiceField(
        choices=User.REVIEW_VISIBILITY_CHOICES,
        error_messages={'invalid_choice': '잘못된 리뷰 공개 범위입니다', 'required': '잘못된 리뷰 공개 범위입니다'},
    )


class UserSummarySerializer(serializers.ModelSerializer):
    """팔로워/팔로잉 목록, 관리자 화면 등에서 쓰는 간단한 유저 정보"""

    class Meta:
        model = User
        fields = ['id', 'username', 'name', 'image', 'role']


class NotificationSerializer(serializers.ModelSerializer):
    actor = UserSummarySerializer(read_only=True)
    gameId = serializers.IntegerField(source='game.igdb_id', read_only=True)
    reviewId = serializers.IntegerField(source='review_id', read_only=True)
    isRead = serializers.BooleanField(source='is_read', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'type', 'message', 'actor', 'gameId', 'reviewId', 'isRead', 'createdAt']


class AdminUserSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source='date_joined', read_only=True)
    reviewCount = serializers.IntegerField(source='review_count', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'username', 'role', 'createdAt', 'reviewCount']


def first_error(errors):
    """serializer.errors 에서 첫 번째 메시지만 꺼내기"""
    for value in errors.values():
        if isinstance(value, dict):
            return first_error(value)
        if value:
            return str(value[0])
    return '잘못된 요청입니다.'
