"""
평점 계산 유틸리티

- 라벨 계산 (매우 긍정적 ~ 매우 부정적)
- 인증 가중 평균
- 베이지안 평균 (리뷰 수가 적은 게임의 평점 조작 방지)
- 시간 가중 평균 (리뷰 폭탄 감지)

리뷰는 Review 인스턴스 또는 rating / is_verified / created_at 키를 가진 dict 모두 허용합니다.
"""
from datetime import timedelta

from django.utils import timezone

from .constants import (
    BAYESIAN_PRIOR_COUNT,
    BAYESIAN_PRIOR_RATING,
    MAX_RATING,
    MIN_RATING,
    RATING_STEP,
    RATING_THRESHOLDS,
    REVIEW_LABELS,
    UNVERIFIED_REVIEW_WEIGHT,
    VERIFIED_REVIEW_WEIGHT,
)

SPIKE_WINDOW = timedelta(days=7)
SPIKE_RATIO = 0.5


def _field(review, name):
    if isinstance(review, dict):
        return review.get(name)
    return getattr(review, name)


def review_weight(review):
    return VERIFIED_REVIEW_WEIGHT if _field(review, 'is_verified') else UNVERIFIED_REVIEW_WEIGHT


def get_rating_label_key(rating):
    """평점 → 라벨 키 (VERY_POSITIVE 등)"""
    if rating >= RATING_THRESHOLDS['VERY_POSITIVE']:
        return 'VERY_POSITIVE'
    if rating >= RATING_THRESHOLDS['POSITIVE']:
        return 'POSITIVE'
    if rating >= RATING_THRESHOLDS['MIXED']:
        return 'MIXED'
    if rating >= RATING_THRESHOLDS['NEGATIVE']:
        return 'NEGATIVE'
    return 'VERY_NEGATIVE'


def get_rating_label(rating):
    """평점 → 한국어 라벨"""
    return REVIEW_LABELS[get_rating_label_key(rating)]


def calculate_weighted_average(reviews):
    """인증 리뷰 1.5배 가중 평균. 리뷰가 없으면 0"""
    reviews = list(reviews)
    if not reviews:
        return 0

    total_weight = sum(review_weight(r) for r in reviews)
    weighted_sum = sum(_field(r, 'rating') * review_weight(r) for r in reviews)
    return weighted_sum / total_weight


def calculate_bayesian_average(reviews):
    """
    베이지안 평균

    공식: (C × m + Σ(rating × weight)) / (C + Σ(weight))
    C = BAYESIAN_PRIOR_COUNT, m = BAYESIAN_PRIOR_RATING
    """
    reviews = list(reviews)
    total_weight = sum(review_weight(r) for r in reviews)
    weighted_sum = sum(_field(r, 'rating') * review_weight(r) for r in reviews)

    numerator = BAYESIAN_PRIOR_COUNT * BAYESIAN_PRIOR_RATING + weighted_sum
    denominator = BAYESIAN_PRIOR_COUNT + total_weight
    return numerator / denominator


def calculate_time_weighted_rating(reviews, now=None):
    """
    시간 가중 평균 (리뷰 폭탄 감지)

    최근 7일 리뷰가 전체의 50%를 넘으면 급증으로 보고,
    최근 리뷰의 가중치를 0.5 + 0.5 * (경과시간 / 7일) 배로 낮춥니다.
    """
    reviews = list(reviews)
    if not reviews:
        return 0

    now = now or timezone.now()
    window = SPIKE_WINDOW.total_seconds()

    def age_seconds(review):
        return (now - _field(review, 'created_at')).total_seconds()

    recent_count = sum(1 for r in reviews if age_seconds(r) <= window)
    is_spike = recent_count / len(reviews) > SPIKE_RATIO

    weighted_sum = 0.0
    total_weight = 0.0
    for review in reviews:
        weight = review_weight(review)
        if is_spike:
            age = age_seconds(review)
            if age <= window:
                decay = min(1.0, age / window)
                weight *= 0.5 + 0.5 * decay
        weighted_sum += _field(review, 'rating') * weight
        total_weight += weight

    return weighted_sum / total_weight


def is_valid_rating(value):
    """0.5 ~ 5.0 사이의 0.5 단위 값인지"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if value < MIN_RATING or value > MAX_RATING:
        return False
    return float(value / RATING_STEP).is_integer()
