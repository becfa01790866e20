"""
리뷰 / 평점 관련 상수
"""

# 리뷰 라벨 (평점 → 한국어 라벨)
REVIEW_LABELS = {
    'VERY_POSITIVE': '매우 긍정적',
    'POSITIVE': '긍정적',
    'MIXED': '혼합',
    'NEGATIVE': '부정적',
    'VERY_NEGATIVE': '매우 부정적',
}

RATING_THRESHOLDS = {
    'VERY_POSITIVE': 4.5,
    'POSITIVE': 3.5,
    'MIXED': 2.5,
    'NEGATIVE': 1.5,
}

# 세부 평가 항목 (모델 필드명 → 표시명)
ELEMENT_RATINGS = {
    'price_rating': '가격',
    'graphics_rating': '그래픽',
    'control_rating': '조작감',
    'direction_rating': '연출',
    'story_rating': '스토리',
    'sound_rating': '사운드',
    'volume_rating': '볼륨',
    'innovation_rating': '독창성',
}

VERIFICATION_TYPES = {
    'STEAM': 'Steam',
    'PLAYSTATION': 'PlayStation',
    'XBOX': 'Xbox',
    'SCREENSHOT': '스크린샷',
}

MIN_RATING = 0.5
MAX_RATING = 5.0
RATING_STEP = 0.5

REVIEW_COMMENT_MAX_LENGTH = 1000

# 인증된 리뷰 가중치
VERIFIED_REVIEW_WEIGHT = 1.5
UNVERIFIED_REVIEW_WEIGHT = 1.0

# 베이지안 평균 사전값
BAYESIAN_PRIOR_COUNT = 10
BAYESIAN_PRIOR_RATING = 3.0
