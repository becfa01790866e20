from datetime import timedelta

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class User(AbstractUser):
    # 기본 필드 (username, password, email 등)는 상속받음
    ROLE_CHOICES = [
        ('user', '일반'),
        ('expert', '전문가'),
        ('influencer', '인플루언서'),
    ]
    PROFILE_VISIBILITY_CHOICES = [
        ('public', '전체 공개'),
        ('private', '비공개'),
    ]
    REVIEW_VISIBILITY_CHOICES = [
        ('public', '전체 공개'),
        ('followers', '팔로워 공개'),
        ('private', '비공개'),
    ]

    email = models.EmailField("이메일", unique=True)

    # 프로필 관련 커스텀 필드
    name = models.CharField("이름", max_length=50, blank=True)
    avatar = models.ImageField("프로필 사진", upload_to="avatars/", null=True, blank=True)
    image = models.CharField("프로필 이미지 URL", max_length=500, default='/default-avatar.png', blank=True)
    role = models.CharField("등급", max_length=20, choices=ROLE_CHOICES, default='user')

    # 공개 범위
    profile_visibility = models.CharField(
        "프로필 공개 범위", max_length=10, choices=PROFILE_VISIBILITY_CHOICES, default='public'
    )
    review_visibility = models.CharField(
        "리뷰 공개 범위", max_length=10, choices=REVIEW_VISIBILITY_CHOICES, default='public'
    )

    # 스팀 연동 관련
    steam_id = models.CharField("스팀 ID", max_length=50, unique=True, null=True, blank=True)

    email_verified = models.DateTimeField("이메일 인증 시각", null=True, blank=True)

    def __str__(self):
        return self.username

    @property
    def display_name(self):
        return self.name or self.username

    def is_site_admin(self):
        """is_staff 이거나 ADMIN_EMAIL 과 일치하면 사이트 관리자"""
        from django.conf import settings
        admin_email = getattr(settings, 'ADMIN_EMAIL', '')
        return self.is_staff or bool(admin_email and self.email == admin_email)

    def is_followed_by(self, other):
        if other is None or not other.is_authenticated:
            return False
        return Follow.objects.filter(follower=other, following=self).exists()

    def can_view_reviews_of(self, viewer):
        """
        viewer 가 이 유저의 리뷰를 볼 수 있는지 확인

        - public: 누구나
        - followers: 본인 + 팔로워
        - private: 본인만
        """
        if viewer is not None and viewer.is_authenticated and viewer.pk == self.pk:
            return True
        if self.review_visibility == 'public':
            return True
        if self.review_visibility == 'followers':
            return self.is_followed_by(viewer)
        return False


class PendingUser(models.Model):
    """
    이메일 인증 전 가입 대기 유저

    인증 코드 확인 후 실제 User 로 옮겨집니다. 24시간 후 만료.
    """
    username = models.CharField(max_length=20, unique=True)
    email = models.EmailField(unique=True)
    password = models.CharField(max_length=128)  # make_password 로 해시된 값
    name = models.CharField(max_length=50, blank=True)
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "가입 대기 유저"
        verbose_name_plural = "가입 대기 유저"

    def __str__(self):
        return f"{self.username} <{self.email}>"

    @staticmethod
    def default_expiry():
        return timezone.now() + timedelta(hours=24)


class VerificationToken(models.Model):
    email = models.EmailField(db_index=True)
    token = models.CharField(max_length=6)
    expires = models.DateTimeField()

    class Meta:
        verbose_name = "인증 코드"
        verbose_name_plural = "인증 코드"

    def __str__(self):
        return f"{self.email}: {self.token}"

    def is_expired(self):
        return self.expires < timezone.now()


class Follow(models.Model):
    follower = models.ForeignKey(User, on_delete=models.CASCADE, related_name='following_set')
    following = models.ForeignKey(User, on_delete=models.CASCADE, related_name='follower_set')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "팔로우"
        verbose_name_plural = "팔로우"
        unique_together = ['follower', 'following']

    def __str__(self):
        return f"{self.follower.username} → {self.following.username}"


class Notification(models.Model):
    TYPE_CHOICES = [
        ('FOLLOW', '팔로우'),
        ('REVIEW', '리뷰'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    message = models.CharField(max_length=300)
    actor = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='sent_notifications', null=True, blank=True
    )
    game = models.ForeignKey('games.Game', on_delete=models.CASCADE, null=True, blank=True)
    review = models.ForeignKey('reviews.Review', on_delete=models.CASCADE, null=True, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "알림"
        verbose_name_plural = "알림"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='users_notif_user_id_5f3c2a_idx'),
        ]

    def __str__(self):
        return f"[{self.type}] {self.user.username}: {self.message}"
