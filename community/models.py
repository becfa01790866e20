from django.conf import settings
from django.db import models


class Community(models.Model):
    """
    게임별 소모임(동아리)

    생성자가 owner 이자 admin 멤버가 됩니다.
    """
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, null=True)
    game = models.ForeignKey('games.Game', on_delete=models.SET_NULL, null=True, blank=True, related_name='communities')
    image = models.CharField(max_length=500, blank=True, null=True)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='owned_communities')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "커뮤니티"
        verbose_name_plural = "커뮤니티"
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def is_owner(self, user):
        return user is not None and user.is_authenticated and self.owner_id == user.pk

    def get_membership(self, user):
        if user is None or not user.is_authenticated:
            return None
        return self.members.filter(user=user).first()

    def is_moderator(self, user):
        """owner 또는 운영진(admin/moderator)"""
        if self.is_owner(user):
            return True
        membership = self.get_membership(user)
        return membership is not None and membership.role in ('admin', 'moderator')


class CommunityMember(models.Model):
    ROLE_CHOICES = [
        ('admin', '동아리장'),
        ('moderator', '운영진'),
        ('member', '일반 부원'),
    ]

    community = models.ForeignKey(Community, on_delete=models.CASCADE, related_name='members')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='community_memberships')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='member')
    nickname = models.CharField(max_length=30, blank=True, null=True)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "커뮤니티 멤버"
        verbose_name_plural = "커뮤니티 멤버"
        unique_together = ('community', 'user')
        ordering = ['joined_at']
        constraints = [
            # 별명은 선택 사항이지만 지정했다면 동아리 안에서 유일
            models.UniqueConstraint(
                fields=['community', 'nickname'],
                condition=models.Q(nickname__isnull=False),
                name='unique_member_nickname_per_community',
            ),
        ]

    def __str__(self):
        return f"{self.community.name} - {self.user.username} ({self.role})"


class Category(models.Model):
    community = models.ForeignKey(Community, on_delete=models.CASCADE, related_name='categories')
    name = models.CharField(max_length=50)
    order = models.IntegerField(default=0)

    class Meta:
        verbose_name = "카테고리"
        verbose_name_plural = "카테고리"
        ordering = ['order']

    def __str__(self):
        return self.name


class Board(models.Model):
    community = models.ForeignKey(Community, on_delete=models.CASCADE, related_name='boards')
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='boards')
    name = models.CharField(max_length=50)
    description = models.TextField(blank=True, null=True)
    order = models.IntegerField(default=0)
    is_notice_board = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "게시판"
        verbose_name_plural = "게시판"
        ordering = ['order']

    def __str__(self):
        return f"{self.community.name} / {self.name}"


class Post(models.Model):
    community = models.ForeignKey(Community, on_delete=models.CASCADE, related_name='posts')
    # 게시판이 삭제되면 게시글은 남고 board 만 null
    board = models.ForeignKey(Board, on_delete=models.SET_NULL, null=True, blank=True, related_name='posts')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='community_posts')
    title = models.CharField(max_length=200)
    content = models.TextField()
    tags = models.JSONField(default=list, blank=True)
    is_notice = models.BooleanField(default=False)
    view_count = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "게시글"
        verbose_name_plural = "게시글"
        ordering = ['-is_notice', '-created_at']

    def __str__(self):
        return self.title


class Comment(models.Model):
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='comments')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='community_comments')
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return f"{self.user}: {self.content[:20]}"


class PostLike(models.Model):
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='likes')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='liked_posts')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('post', 'user')
