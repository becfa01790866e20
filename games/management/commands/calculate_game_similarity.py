"""
리뷰 평점 기반 게임 유사도 재계산

    python manage.py calculate_game_similarity --min-ratings 5 --top-k 30
    python manage.py calculate_game_similarity --dry-run

cron 예시 (매일 03:00):
    0 3 * * * cd /srv/gampfire && python manage.py calculate_game_similarity
"""
import time

import numpy as np
from django.core.management.base import BaseCommand

from games.similarity import (
    MIN_TOTAL_RATINGS,
    compute_similarity_pairs,
    load_ratings,
    save_similarities,
)


class Command(BaseCommand):
    help = '전체 리뷰로 게임 간 코사인 유사도를 다시 계산해 GameSimilarity 를 교체합니다.'

    def add_arguments(self, parser):
        parser.add_argument('--min-ratings', type=int, default=3,
                            help='계산에 포함할 게임의 최소 평가 수 (기본 3)')
        parser.add_argument('--top-k', type=int, default=50,
                            help='게임당 보관할 유사 게임 수 (기본 50)')
        parser.add_argument('--min-similarity', type=float, default=0.1,
                            help='이 값 미만의 유사도는 버림 (기본 0.1)')
        parser.add_argument('--dry-run', action='store_true',
                            help='계산 결과만 보고 DB 는 건드리지 않음')

    def handle(self, *args, **options):
        started = time.time()
        self.stdout.write(self.style.NOTICE('게임 유사도 계산 시작'))

        ratings = load_ratings()
        if len(ratings) < MIN_TOTAL_RATINGS:
            self.stdout.write(self.style.WARNING(
                f'리뷰 데이터가 너무 적습니다 ({len(ratings)}/{MIN_TOTAL_RATINGS}).'
            ))
            return
        self.stdout.write(f'  리뷰 {len(ratings)}개 로드')

        pairs = compute_similarity_pairs(
            ratings,
            min_ratings=options['min_ratings'],
            top_k=options['top_k'],
            min_similarity=options['min_similarity'],
        )
        if not pairs:
            self.stdout.write(self.style.WARNING('유사도를 계산할 게임이 부족합니다.'))
            return

        scores = np.array([data['score'] for data in pairs.values()])
        self.stdout.write(f'  유사도 쌍 {len(pairs)}개, 평균 {scores.mean():.4f}, 최대 {scores.max():.4f}')

        if options['dry_run']:
            self.stdout.write(self.style.SUCCESS('[DRY RUN] 저장하지 않고 종료'))
            return

        deleted, created = save_similarities(pairs)
        self.stdout.write(self.style.SUCCESS(
            f'완료: 기존 {deleted}개 삭제, {created}개 저장 ({time.time() - started:.2f}초)'
        ))
