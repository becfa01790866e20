from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .constants import MAX_RATING, MIN_RATING, VERIFICATION_TYPES


def element_rating_field(verbose_name):
    return models.FloatField(
        verbose_name,
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )


class Review(models.Model):
    """
    유저 게임 리뷰

    - 한 유저는 한 게임에 하나의 리뷰만 (upsert)
    - rating: 0.5 ~ 5.0 (0.5 단위)
    - 세부 평가 8개 항목은 선택 입력 (1 ~ 5)
    """
    VERIFICATION_CHOICES = list(VERIFICATION_TYPES.items())

    game = models.ForeignKey('games.Game', on_delete=models.CASCADE, related_name='reviews')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews')
    rating = models.FloatField(
        "평점", validators=[MinValueValidator(MIN_RATING), MaxValueValidator(MAX_RATING)]
    )
    comment = models.TextField("한줄평", null=True, blank=True)
    label = models.CharField("라벨", max_length=20)

    # 인증 (소유 증명)
    is_verified = models.BooleanField(default=False)
    verification_type = models.CharField(max_length=20, choices=VERIFICATION_CHOICES, null=True, blank=True)
    verification_proof = models.URLField(max_length=500, null=True, blank=True)

    # 세부 평가
    price_rating = element_rating_field("가격")
    graphics_rating = element_rating_field("그래픽")
    control_rating = element_rating_field("조작감")
    direction_rating = element_rating_field("연출")
    story_rating = element_rating_field("스토리")
    sound_rating = element_rating_field("사운드")
    volume_rating = element_rating_field("볼륨")
    innovation_rating = element_rating_field("독창성")

    likes_count = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "리뷰"
        verbose_name_plural = "리뷰"
        unique_together = ('game', 'user')  # 한 유저는 한 게임에 하나의 평가만
        indexes = [
            models.Index(fields=['game', '-created_at'], name='reviews_rev_game_id_2e8f4a_idx'),
            models.Index(fields=['-likes_count'], name='reviews_rev_likes_c_7b1d90_idx'),
        ]

    def __str__(self):
        return f"{self.user.username} - {self.game.title}: {self.rating}"


class ReviewLike(models.Model):
    TYPE_CHOICES = [
        ('like', '추천'),
        ('dislike', '비추천'),
    ]

    review = models.ForeignKey(Review, on_delete=models.CASCADE, related_name='likes')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='review_votes')
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "리뷰 투표"
        verbose_name_plural = "리뷰 투표"
        unique_together = ('review', 'user')

    def __str__(self):
        return f"{self.user.username} {self.type} review#{self.review_id}"
