import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("teams", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Phase1Submission",
            fields=[
                (
                    "team",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        primary_key=True,
                        related_name="phase1_submission",
                        serialize=False,
                        to="teams.team",
                        verbose_name="队伍",
                    ),
                ),
                ("team_name", models.CharField(max_length=120, verbose_name="队伍名称")),
                ("college_name", models.CharField(max_length=200, verbose_name="学校")),
                ("whatsapp_number", models.CharField(max_length=20, verbose_name="WhatsApp 号码")),
                ("product_description", models.TextField(verbose_name="产品描述")),
                ("solution", models.TextField(verbose_name="解决方案")),
                ("file_url", models.CharField(max_length=500, verbose_name="演示文稿地址")),
                ("youtube_link", models.CharField(blank=True, max_length=500, verbose_name="视频链接")),
                ("submitted_at", models.DateTimeField(verbose_name="提交时间")),
                ("updated_at", models.DateTimeField(verbose_name="更新时间")),
                ("points", models.PositiveSmallIntegerField(blank=True, null=True, verbose_name="得分")),
                ("review", models.TextField(blank=True, verbose_name="评语")),
                ("reviewed_at", models.DateTimeField(blank=True, null=True, verbose_name="评审时间")),
            ],
            options={
                "verbose_name": "第一阶段作品",
                "verbose_name_plural": "第一阶段作品",
                "ordering": ["submitted_at"],
            },
        ),
        migrations.CreateModel(
            name="Phase2Submission",
            fields=[
                (
                    "team",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        primary_key=True,
                        related_name="phase2_submission",
                        serialize=False,
                        to="teams.team",
                        verbose_name="队伍",
                    ),
                ),
                ("proposal_url", models.CharField(blank=True, max_length=500, verbose_name="商业计划书地址")),
                ("youtube_video_url", models.CharField(blank=True, max_length=500, verbose_name="视频链接")),
                ("submitted_at", models.DateTimeField(verbose_name="提交时间")),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "待评审")], default="pending", max_length=20, verbose_name="状态"
                    ),
                ),
            ],
            options={
                "verbose_name": "第二阶段方案",
                "verbose_name_plural": "第二阶段方案",
                "ordering": ["submitted_at"],
            },
        ),
    ]
