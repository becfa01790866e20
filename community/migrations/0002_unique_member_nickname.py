from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('community', '0001_initial'),
    ]

    operations = [
        migrations.AddConstraint(
            model_name='communitymember',
            constraint=models.UniqueConstraint(
                condition=models.Q(('nickname__isnull', False)),
                fields=('community', 'nickname'),
                name='unique_member_nickname_per_community',
            ),
        ),
    ]
