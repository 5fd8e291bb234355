import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email", models.EmailField(db_index=True, max_length=254, verbose_name="付款邮箱")),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "待缴费"), ("paid", "已缴费")],
                        default="pending",
                        max_length=10,
                        verbose_name="状态",
                    ),
                ),
                ("amount", models.DecimalField(decimal_places=2, default=0, max_digits=10, verbose_name="金额")),
                ("reference", models.CharField(blank=True, max_length=120, verbose_name="支付流水号")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="创建时间")),
            ],
            options={
                "verbose_name": "付款记录",
                "verbose_name_plural": "付款记录",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Team",
            fields=[
                (
                    "owner",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        primary_key=True,
                        related_name="team",
                        serialize=False,
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="队长账号",
                    ),
                ),
                ("team_name", models.CharField(max_length=120, verbose_name="队伍名称")),
                ("registration_id", models.CharField(max_length=32, unique=True, verbose_name="注册编号")),
                ("college_name", models.CharField(blank=True, max_length=200, verbose_name="学校")),
                ("members", models.JSONField(default=list, help_text="有序成员列表，下标 0 为队长", verbose_name="成员")),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "待缴费"), ("paid", "已缴费")],
                        db_index=True,
                        default="pending",
                        max_length=10,
                        verbose_name="缴费状态",
                    ),
                ),
                ("phase2_selected", models.BooleanField(db_index=True, default=False, verbose_name="入选第二阶段")),
                ("is_regional_team", models.BooleanField(default=False, verbose_name="地区队伍")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="创建时间")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="更新时间")),
            ],
            options={
                "verbose_name": "队伍",
                "verbose_name_plural": "队伍",
                "ordering": ["team_name"],
            },
        ),
    ]
