from django.contrib import admin

from .models import Game, GameSimilarity


@admin.register(Game)
class GameAdmin(admin.ModelAdmin):
    list_display = ['title', 'igdb_id', 'steam_appid', 'average_rating', 'total_reviews', 'hot_score']
    search_fields = ['title', 'igdb_id', 'steam_appid']
    ordering = ['-hot_score']
    readonly_fields = ['average_rating', 'total_reviews', 'verified_reviews', 'hot_score_updated_at']


@admin.register(GameSimilarity)
class GameSimilarityAdmin(admin.ModelAdmin):
    list_display = ('game_a', 'game_b', 'similarity_score', 'similarity_rank', 'calculated_at')
    list_filter = ('similarity_rank',)
    search_fields = ('game_a__title', 'game_b__title')
    ordering = ('-similarity_score',)
