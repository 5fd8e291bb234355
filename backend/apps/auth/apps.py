# -*- coding: utf-8 -*-
from django.apps import AppConfig


class AuthConfig(AppConfig):
    """
    认证与身份解析应用配置
    - label 设置为 spark_auth 以避免与 django.contrib.auth 冲突
    """

    name = "apps.auth"
    label = "spark_auth"
    verbose_name = "Authentication And Identity"
