"""
리뷰된 게임에 Steam 유저 태그(SteamSpy) 저장

사용법:
    python manage.py update_tags
    python manage.py update_tags --limit 100
"""
from django.core.management.base import BaseCommand

from games.hot_scores import TAG_BATCH_SIZE, update_tags


class Command(BaseCommand):
    help = '리뷰가 있지만 태그가 없는 게임에 SteamSpy 태그를 저장합니다.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--limit',
            type=int,
            default=TAG_BATCH_SIZE,
            help=f'처리할 게임 수 (리뷰 많은 순, 기본: {TAG_BATCH_SIZE})'
        )
        parser.add_argument(
            '--delay',
            type=float,
            default=1.0,
            help='요청 간 딜레이 (초, 기본: 1.0)'
        )

    def handle(self, *args, **options):
        result = update_tags(limit=options['limit'], delay=options['delay'])

        if result['failed']:
            self.stdout.write(self.style.WARNING(f"  실패: {result['failed']}개"))
        self.stdout.write(self.style.SUCCESS(f"✅ 태그 저장: {result['updated']}개"))
