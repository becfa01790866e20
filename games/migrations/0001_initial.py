import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Game',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('igdb_id', models.IntegerField(blank=True, null=True, unique=True)),
                ('steam_appid', models.IntegerField(blank=True, null=True)),
                ('title', models.CharField(max_length=300)),
                ('description', models.TextField(blank=True, null=True)),
                ('cover_image', models.URLField(blank=True, max_length=500, null=True)),
                ('release_date', models.DateTimeField(blank=True, null=True)),
                ('platforms', models.JSONField(blank=True, default=list)),
                ('genres', models.JSONField(blank=True, default=list)),
                ('tags', models.JSONField(blank=True, help_text='Steam 유저 태그 (없으면 null)', null=True)),
                ('developer', models.CharField(blank=True, max_length=200, null=True)),
                ('publisher', models.CharField(blank=True, max_length=200, null=True)),
                ('metacritic_score', models.IntegerField(blank=True, null=True)),
                ('average_rating', models.FloatField(default=0)),
                ('total_reviews', models.IntegerField(default=0)),
                ('verified_reviews', models.IntegerField(default=0)),
                ('hot_score', models.FloatField(default=0)),
                ('hot_score_updated_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': '게임',
                'verbose_name_plural': '게임',
                'indexes': [
                    models.Index(fields=['steam_appid'], name='games_game_steam_a_1d2f0c_idx'),
                    models.Index(fields=['-hot_score'], name='games_game_hot_sco_8a41b7_idx'),
                    models.Index(fields=['-average_rating'], name='games_game_average_3c9e52_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='GameSimilarity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('similarity_score', models.FloatField(verbose_name='유사도 점수')),
                ('similarity_rank', models.PositiveIntegerField(db_index=True, default=0, help_text='해당 게임 기준 유사도 순위 (1이 가장 유사)', verbose_name='유사도 순위')),
                ('calculated_at', models.DateTimeField(auto_now=True)),
                ('game_a', models.ForeignKey(help_text='항상 game_b보다 작은 ID', on_delete=django.db.models.deletion.CASCADE, related_name='similarity_from', to='games.game')),
                ('game_b', models.ForeignKey(help_text='항상 game_a보다 큰 ID', on_delete=django.db.models.deletion.CASCADE, related_name='similarity_to', to='games.game')),
            ],
            options={
                'verbose_name': '게임 유사도',
                'verbose_name_plural': '게임 유사도',
                'unique_together': {('game_a', 'game_b')},
                'indexes': [
                    models.Index(fields=['game_a', 'similarity_rank'], name='games_games_game_a__4b7d21_idx'),
                    models.Index(fields=['game_b', 'similarity_rank'], name='games_games_game_b__9c0e63_idx'),
                ],
            },
        ),
    ]
