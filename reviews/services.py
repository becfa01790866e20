"""
리뷰 도메인 서비스

뷰와 배치 작업(온보딩, 관리자 삭제, 통계 재계산)에서 공통으로 사용합니다.
"""
import logging
from collections import Counter

from django.db import transaction
from django.db.models import Avg, Count, F, Q

from .constants import ELEMENT_RATINGS, REVIEW_LABELS
from .models import Review, ReviewLike
from .rating import get_rating_label

logger = logging.getLogger(__name__)

UNCHANGED = object()


def update_game_stats(game):
    """게임의 평균 평점, 리뷰 수, 인증 리뷰 수 재계산"""
    stats = Review.objects.filter(game=game).aggregate(
        avg=Avg('rating'),
        total=Count('id'),
        verified=Count('id', filter=Q(is_verified=True)),
    )
    game.average_rating = stats['avg'] or 0
    game.total_reviews = stats['total']
    game.verified_reviews = stats['verified']
    game.save(update_fields=['average_rating', 'total_reviews', 'verified_reviews', 'updated_at'])
    return game


def notify_followers_of_review(review):
    """새 리뷰 작성 시 작성자의 팔로워 전원에게 REVIEW 알림"""
    from users.models import Follow, Notification

    author = review.user
    follower_ids = list(
        Follow.objects.filter(following=author).values_list('follower_id', flat=True)
    )
    if not follower_ids:
        return 0

    message = f'{author.name or author.email}님이 "{review.game.title}"에 평가를 남겼습니다'
    Notification.objects.bulk_create([
        Notification(
            user_id=follower_id,
            type='REVIEW',
            message=message,
            actor=author,
            game=review.game,
            review=review,
        )
        for follower_id in follower_ids
    ])
    logger.info(f"Created {len(follower_ids)} notifications for new review #{review.pk}")
    return len(follower_ids)


@transaction.atomic
def create_or_update_review(user, game, rating, comment=UNCHANGED, element_ratings=None, notify=True):
    """
    (게임, 유저) 당 하나의 리뷰 upsert

    - 라벨은 평점으로 다시 계산
    - comment / element_ratings 를 넘기지 않으면 기존 값 유지
    - 새 리뷰일 때만 팔로워 알림
    - 게임 통계 갱신

    Returns:
        (review, created)
    """
    defaults = {
        'rating': rating,
        'label': get_rating_label(rating),
    }
    if comment is not UNCHANGED:
        defaults['comment'] = comment or None
    if element_ratings is not None:
        for field in ELEMENT_RATINGS:
            defaults[field] = element_ratings.get(field) or None

    review, created = Review.objects.update_or_create(game=game, user=user, defaults=defaults)

    if created and notify:
        notify_followers_of_review(review)

    update_game_stats(game)
    return review, created


@transaction.atomic
def delete_review(review):
    game = review.game
    review.delete()
    update_game_stats(game)


@transaction.atomic
def vote_review(review, user, vote_type):
    """
    리뷰 추천/비추천

    - 같은 타입을 다시 누르면 취소 (type None)
    - 다른 타입으로 바꾸면 likes_count 를 ±1
    - likes_count 는 추천(like) 수만 센다

    Returns:
        (현재 투표 타입 또는 None, likes_count)
    """
    existing = ReviewLike.objects.filter(review=review, user=user).first()

    if existing is None:
        ReviewLike.objects.create(review=review, user=user, type=vote_type)
        current = vote_type
        delta = 1 if vote_type == 'like' else 0
    elif existing.type == vote_type:
        existing.delete()
        current = None
        delta = -1 if vote_type == 'like' else 0
    else:
        previous = existing.type
        existing.type = vote_type
        existing.save(update_fields=['type'])
        current = vote_type
        delta = 1 if previous == 'dislike' else -1

    if delta:
        Review.objects.filter(pk=review.pk).update(likes_count=F('likes_count') + delta)
        review.refresh_from_db(fields=['likes_count'])

    return current, review.likes_count


def get_user_votes(user, reviews):
    """{review_id: 'like' | 'dislike'} (비로그인이면 빈 dict)"""
    if user is None or not user.is_authenticated:
        return {}
    review_ids = [r.pk for r in reviews]
    return dict(
        ReviewLike.objects.filter(user=user, review_id__in=review_ids).values_list('review_id', 'type')
    )


def game_statistics(game):
    """
    게임 상세 통계

    - ratingDistribution: 0.5 단위 평점별 개수
    - labelDistribution: 라벨별 개수
    - elementAverages: 세부 평가 항목별 평균 (입력된 값만)
    """
    reviews = Review.objects.filter(game=game)

    ratings = list(reviews.values_list('rating', flat=True))
    rating_counter = Counter(ratings)
    rating_distribution = {
        str(step / 2): rating_counter.get(step / 2, 0) for step in range(1, 11)
    }

    label_counter = Counter(reviews.values_list('label', flat=True))
    label_distribution = {label: label_counter.get(label, 0) for label in REVIEW_LABELS.values()}

    aggregates = reviews.aggregate(**{f'{field}_avg': Avg(field) for field in ELEMENT_RATINGS})
    element_averages = {}
    for field in ELEMENT_RATINGS:
        value = aggregates[f'{field}_avg']
        element_averages[field] = round(value, 2) if value is not None else None

    return {
        'totalReviews': len(ratings),
        'ratingDistribution': rating_distribution,
        'labelDistribution': label_distribution,
        'elementAverages': element_averages,
    }


def visible_reviews(queryset, viewer):
    """작성자의 review_visibility 에 따라 viewer 가 볼 수 있는 리뷰만"""
    from users.models import Follow

    visible = Q(user__review_visibility='public')
    if viewer is not None and viewer.is_authenticated:
        followed_ids = Follow.objects.filter(follower=viewer).values('following_id')
        visible |= Q(user=viewer)
        visible |= Q(user__review_visibility='followers', user_id__in=followed_ids)
    return queryset.filter(visible)
