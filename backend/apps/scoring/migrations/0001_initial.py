from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ResultsConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(default="phase1Results", max_length=40, unique=True, verbose_name="键")),
                ("published", models.BooleanField(default=False, verbose_name="已发布")),
                ("published_at", models.DateTimeField(blank=True, null=True, verbose_name="发布时间")),
            ],
            options={
                "verbose_name": "成绩发布配置",
                "verbose_name_plural": "成绩发布配置",
            },
        ),
    ]
