from django.db import models

from .translations import translate_genres, translate_platforms


class Game(models.Model):
    """
    게임 기본 정보

    - IGDB 메타데이터 (igdb_id 기준 upsert)
    - 리뷰 통계 (average_rating, total_reviews, verified_reviews)
    - Steam 인기도 기반 hot_score (배치 작업으로 갱신)
    """
    igdb_id = models.IntegerField(unique=True, null=True, blank=True)
    steam_appid = models.IntegerField(null=True, blank=True)  # 스팀 연동용
    title = models.CharField(max_length=300)
    description = models.TextField(null=True, blank=True)
    cover_image = models.URLField(max_length=500, null=True, blank=True)
    release_date = models.DateTimeField(null=True, blank=True)

    # 목록형 메타데이터는 JSON 배열로 저장
    platforms = models.JSONField(default=list, blank=True)
    genres = models.JSONField(default=list, blank=True)
    tags = models.JSONField(null=True, blank=True, help_text='Steam 유저 태그 (없으면 null)')

    developer = models.CharField(max_length=200, null=True, blank=True)
    publisher = models.CharField(max_length=200, null=True, blank=True)
    metacritic_score = models.IntegerField(null=True, blank=True)

    # 리뷰 통계
    average_rating = models.FloatField(default=0)
    total_reviews = models.IntegerField(default=0)
    verified_reviews = models.IntegerField(default=0)

    # Steam 인기도
    hot_score = models.FloatField(default=0)
    hot_score_updated_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "게임"
        verbose_name_plural = "게임"
        indexes = [
            models.Index(fields=['steam_appid'], name='games_game_steam_a_1d2f0c_idx'),
            models.Index(fields=['-hot_score'], name='games_game_hot_sco_8a41b7_idx'),
            models.Index(fields=['-average_rating'], name='games_game_average_3c9e52_idx'),
        ]

    def __str__(self):
        return self.title

    def to_card(self):
        """목록 화면용 직렬화 (id 는 IGDB ID)"""
        return {
            'id': self.igdb_id,
            'title': self.title,
            'coverImage': self.cover_image,
            'genres': self.genres or [],
            'genresKo': translate_genres(self.genres or []),
            'platforms': self.platforms or [],
            'platformsKo': translate_platforms(self.platforms or []),
            'releaseDate': self.release_date.isoformat() if self.release_date else None,
            'averageRating': self.average_rating,
            'totalReviews': self.total_reviews,
        }


class GameSimilarity(models.Model):
    """
    게임 간 유사도 (미리 계산된 데이터)

    - calculate_game_similarity 배치 작업으로 계산
    - Item-Based Collaborative Filtering 에 사용

    ⚠️ 저장 규칙: game_a_id < game_b_id 로 정규화하여 저장
    """
    game_a = models.ForeignKey(
        Game,
        on_delete=models.CASCADE,
        related_name='similarity_from',
        help_text='항상 game_b보다 작은 ID'
    )
    game_b = models.ForeignKey(
        Game,
        on_delete=models.CASCADE,
        related_name='similarity_to',
        help_text='항상 game_a보다 큰 ID'
    )
    similarity_score = models.FloatField("유사도 점수")  # 0 ~ 1

    # Top-K 쿼리 최적화용 랭크 (배치 계산 시 설정)
    similarity_rank = models.PositiveIntegerField(
        "유사도 순위",
        default=0,
        help_text='해당 게임 기준 유사도 순위 (1이 가장 유사)',
        db_index=True
    )

    calculated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "게임 유사도"
        verbose_name_plural = "게임 유사도"
        unique_together = ['game_a', 'game_b']
        indexes = [
            models.Index(fields=['game_a', 'similarity_rank'], name='games_games_game_a__4b7d21_idx'),
            models.Index(fields=['game_b', 'similarity_rank'], name='games_games_game_b__9c0e63_idx'),
        ]

    def __str__(self):
        return f"{self.game_a.title} ↔ {self.game_b.title}: {self.similarity_score:.2f} (rank: {self.similarity_rank})"

    @staticmethod
    def normalize_game_ids(game_x_id, game_y_id):
        """두 게임 ID를 (min, max) 순서로 반환"""
        return (min(game_x_id, game_y_id), max(game_x_id, game_y_id))

    @classmethod
    def get_similar_games(cls, game_id, limit=20):
        """
        특정 게임과 유사한 게임 목록 조회

        Returns:
            list: [(game_id, similarity_score), ...]
        """
        from django.db.models import Q

        results = cls.objects.filter(
            Q(game_a_id=game_id) | Q(game_b_id=game_id),
            similarity_rank__lte=limit
        ).values_list('game_a_id', 'game_b_id', 'similarity_score')

        similar = []
        for game_a_id, game_b_id, score in results:
            # 자신이 아닌 쪽의 게임 ID 반환
            other_id = game_b_id if game_a_id == game_id else game_a_id
            similar.append((other_id, score))

        return sorted(similar, key=lambda x: x[1], reverse=True)[:limit]
