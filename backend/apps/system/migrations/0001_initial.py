from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SystemConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(db_index=True, max_length=120, unique=True, verbose_name="键")),
                ("value", models.TextField(verbose_name="配置值")),
                (
                    "value_type",
                    models.CharField(
                        choices=[
                            ("string", "字符串"),
                            ("int", "整数"),
                            ("bool", "布尔"),
                            ("json", "JSON"),
                            ("datetime", "时间（ISO-8601）"),
                            ("secret", "敏感字符串"),
                        ],
                        default="string",
                        max_length=20,
                        verbose_name="值类型",
                    ),
                ),
                ("description", models.TextField(blank=True, verbose_name="说明")),
                ("is_sensitive", models.BooleanField(default=False, help_text="后台仅展示脱敏值", verbose_name="敏感字段")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="创建时间")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="更新时间")),
            ],
            options={
                "verbose_name": "系统配置",
                "verbose_name_plural": "系统配置",
                "ordering": ["key"],
            },
        ),
        migrations.CreateModel(
            name="MailAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(help_text="后台展示用名称", max_length=50, verbose_name="名称")),
                ("host", models.CharField(max_length=120, verbose_name="SMTP 主机")),
                ("port", models.PositiveIntegerField(default=587, verbose_name="端口")),
                ("use_tls", models.BooleanField(default=True, verbose_name="启用 TLS")),
                ("use_ssl", models.BooleanField(default=False, verbose_name="启用 SSL")),
                ("username", models.EmailField(help_text="邮箱账号", max_length=254, verbose_name="用户名")),
                ("password", models.CharField(help_text="授权码或应用专用密码", max_length=255, verbose_name="密码")),
                ("from_name", models.CharField(blank=True, help_text="展示名，例如 Startup Spark", max_length=100, verbose_name="发信名称")),
                ("priority", models.PositiveIntegerField(default=100, help_text="数字越小优先级越高", verbose_name="优先级")),
                ("is_active", models.BooleanField(default=True, verbose_name="启用")),
                ("is_default", models.BooleanField(default=False, help_text="设为 True 后其余账号将自动取消默认", verbose_name="默认账号")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="创建时间")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="更新时间")),
            ],
            options={
                "verbose_name": "发信账号",
                "verbose_name_plural": "发信账号",
                "ordering": ["priority", "-updated_at"],
            },
        ),
    ]
