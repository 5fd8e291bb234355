from django.apps import AppConfig


class SystemConfigAppConfig(AppConfig):
    """
    系统配置模块 AppConfig

    - 注册后台动态配置（SystemConfig）与发信账号（MailAccount）
    - 启动时初始化日志系统（仅读取 settings，不访问数据库）
    - 配置项初始化由 `manage.py sync_system_configs` 显式执行，避免迁移阶段写库
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.system"
    label = "system"
    verbose_name = "System"

    def ready(self):
        from apps.common.infra.logger import configure_logging, get_log_path_from_settings

        configure_logging(force=True, log_file_path=get_log_path_from_settings())
