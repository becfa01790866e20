"""
Steam 인기 순위 기반 hot score 갱신 Management Command

사용법:
    python manage.py update_hot_scores
    python manage.py update_hot_scores --delay 0.5

배치 스케줄링 (cron):
    # 매일 새벽 4시에 실행
    0 4 * * * cd /path/to/project && python manage.py update_hot_scores
"""
from django.core.management.base import BaseCommand

from games.hot_scores import update_hot_scores


class Command(BaseCommand):
    help = 'Steam Top Sellers / Most Played 순위로 게임 hot score 를 갱신합니다.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--delay',
            type=float,
            default=0.1,
            help='게임 간 딜레이 (초, 기본: 0.1 - API 제한 방지)'
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.NOTICE('===== Hot score 갱신 시작 ====='))

        result = update_hot_scores(delay=options['delay'])
        stats = result['stats']

        self.stdout.write(f"  Top Sellers: {stats['topSellersCount']}개, Most Played: {stats['mostPlayedCount']}개")
        self.stdout.write(f"  처리 대상 게임: {stats['uniqueGames']}개")
        self.stdout.write(f"  갱신 {stats['updatedCount']}개 / 생성 {stats['createdCount']}개 / 감소 {stats['decayedCount']}개")

        for message in result['errors']:
            self.stdout.write(self.style.WARNING(f'  {message}'))

        self.stdout.write(self.style.SUCCESS(f"\n✅ 완료 (에러 {stats['errors']}개)"))
