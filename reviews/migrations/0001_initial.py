import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def element_field(verbose_name):
    return models.FloatField(
        blank=True,
        null=True,
        validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)],
        verbose_name=verbose_name,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('games', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Review',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rating', models.FloatField(validators=[django.core.validators.MinValueValidator(0.5), django.core.validators.MaxValueValidator(5.0)], verbose_name='평점')),
                ('comment', models.TextField(blank=True, null=True, verbose_name='한줄평')),
                ('label', models.CharField(max_length=20, verbose_name='라벨')),
                ('is_verified', models.BooleanField(default=False)),
                ('verification_type', models.CharField(blank=True, choices=[('STEAM', 'Steam'), ('PLAYSTATION', 'PlayStation'), ('XBOX', 'Xbox'), ('SCREENSHOT', '스크린샷')], max_length=20, null=True)),
                ('verification_proof', models.URLField(blank=True, max_length=500, null=True)),
                ('price_rating', element_field('가격')),
                ('graphics_rating', element_field('그래픽')),
                ('control_rating', element_field('조작감')),
                ('direction_rating', element_field('연출')),
                ('story_rating', element_field('스토리')),
                ('sound_rating', element_field('사운드')),
                ('volume_rating', element_field('볼륨')),
                ('innovation_rating', element_field('독창성')),
                ('likes_count', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('game', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reviews', to='games.game')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reviews', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': '리뷰',
                'verbose_name_plural': '리뷰',
                'unique_together': {('game', 'user')},
                'indexes': [
                    models.Index(fields=['game', '-created_at'], name='reviews_rev_game_id_2e8f4a_idx'),
                    models.Index(fields=['-likes_count'], name='reviews_rev_likes_c_7b1d90_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReviewLike',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('like', '추천'), ('dislike', '비추천')], max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('review', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='likes', to='reviews.review')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='review_votes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': '리뷰 투표',
                'verbose_name_plural': '리뷰 투표',
                'unique_together': {('review', 'user')},
            },
        ),
    ]
