"""
reviews 앱의 DRF Serializers
"""
from rest_framework import serializers

from .constants import REVIEW_COMMENT_MAX_LENGTH
from .models import Review
from .rating import is_valid_rating

# API 필드명 (camelCase) → 모델 필드명
ELEMENT_API_FIELDS = {
    'priceRating': 'price_rating',
    'graphicsRating': 'graphics_rating',
    'controlRating': 'control_rating',
    'directionRating': 'direction_rating',
    'storyRating': 'story_rating',
    'soundRating': 'sound_rating',
    'volumeRating': 'volume_rating',
    'innovationRating': 'innovation_rating',
}


class ReviewUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    username = serializers.CharField()
    image = serializers.CharField()
    role = serializers.CharField()


class ReviewGameSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    igdbId = serializers.IntegerField(source='igdb_id')
    title = serializers.CharField()
    coverImage = serializers.CharField(source='cover_image')


class ReviewSerializer(serializers.ModelSerializer):
    """
    리뷰 조회용

    context['votes'] 에 {review_id: type} 를 넘기면 userVote 를 채웁니다.
    """
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    likesCount = serializers.IntegerField(source='likes_count', read_only=True)
    isVerified = serializers.BooleanField(source='is_verified', read_only=True)
    priceRating = serializers.FloatField(source='price_rating', read_only=True)
    graphicsRating = serializers.FloatField(source='graphics_rating', read_only=True)
    controlRating = serializers.FloatField(source='control_rating', read_only=True)
    directionRating = serializers.FloatField(source='direction_rating', read_only=True)
    storyRating = serializers.FloatField(source='story_rating', read_only=True)
    soundRating = serializers.FloatField(source='sound_rating', read_only=True)
    volumeRating = serializers.FloatField(source='volume_rating', read_only=True)
    innovationRating = serializers.FloatField(source='innovation_rating', read_only=True)
    user = ReviewUserSerializer(read_only=True)
    userVote = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = [
            'id', 'rating', 'comment', 'label', 'createdAt', 'likesCount', 'isVerified',
            *ELEMENT_API_FIELDS, 'user', 'userVote',
        ]

    def get_userVote(self, obj):
        return self.context.get('votes', {}).get(obj.pk)


class ReviewWithGameSerializer(ReviewSerializer):
    game = ReviewGameSerializer(read_only=True)

    class Meta(ReviewSerializer.Meta):
        fields = ReviewSerializer.Meta.fields + ['game']


class ReviewCreateSerializer(serializers.Serializer):
    """
    리뷰 작성/수정 입력

    gameId 는 IGDB 게임 ID
    """
    gameId = serializers.IntegerField()
    rating = serializers.FloatField()
    comment = serializers.CharField(
        max_length=REVIEW_COMMENT_MAX_LENGTH, required=False, allow_blank=True, allow_null=True
    )
    priceRating = serializers.FloatField(required=False, allow_null=True, min_value=1, max_value=5)
    graphicsRating = serializers.FloatField(required=False, allow_null=True, min_value=1, max_value=5)
    controlRating = serializers.FloatField(required=False, allow_null=True, min_value=1, max_value=5)
    directionRating = serializers.FloatField(required=False, allow_null=True, min_value=1, max_value=5)
    storyRating = serializers.FloatField(required=False, allow_null=True, min_value=1, max_value=5)
    soundRating = serializers.FloatField(required=False, allow_null=True, min_value=1, max_value=5)
    volumeRating = serializers.FloatField(required=False, allow_null=True, min_value=1, max_value=5)
    innovationRating = serializers.FloatField(required=False, allow_null=True, min_value=1, max_value=5)

    def validate_rating(self, value):
        if not is_valid_rating(value):
            raise serializers.ValidationError('평점은 0.5 ~ 5.0 사이의 0.5 단위여야 합니다.')
        return value

    def validate_comment(self, value):
        if value is not None:
            value = value.strip()
        return value or None

    def element_ratings(self):
        """검증된 세부 평가 → {모델 필드명: 값}"""
        return {
            model_name: self.validated_data.get(api_name)
            for api_name, model_name in ELEMENT_API_FIELDS.items()
        }


class VoteSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=['like', 'dislike'])


class OnboardingRatingSerializer(serializers.Serializer):
    gameId = serializers.IntegerField()
    rating = serializers.FloatField()

    def validate_rating(self, value):
        if not is_valid_rating(value):
            raise serializers.ValidationError('평점은 0.5 ~ 5.0 사이의 0.5 단위여야 합니다.')
        return value
