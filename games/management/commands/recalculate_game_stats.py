"""
전체 게임의 리뷰 통계(평균 평점, 리뷰 수, 인증 리뷰 수) 재계산

사용법:
    python manage.py recalculate_game_stats
    python manage.py recalculate_game_stats --only-reviewed
"""
from django.core.management.base import BaseCommand

from games.models import Game
from reviews.services import update_game_stats


class Command(BaseCommand):
    help = '게임별 리뷰 통계를 다시 계산합니다.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--only-reviewed',
            action='store_true',
            help='리뷰가 있는 게임만 처리'
        )

    def handle(self, *args, **options):
        games = Game.objects.all()
        if options['only_reviewed']:
            games = games.filter(reviews__isnull=False).distinct()

        count = 0
        for game in games.iterator():
            before = (game.average_rating, game.total_reviews)
            update_game_stats(game)
            if before != (game.average_rating, game.total_reviews):
                self.stdout.write(
                    f'  {game.title}: {before[0]:.2f} ({before[1]}) → '
                    f'{game.average_rating:.2f} ({game.total_reviews})'
                )
            count += 1

        self.stdout.write(self.style.SUCCESS(f'✅ {count}개 게임 통계 재계산 완료'))
