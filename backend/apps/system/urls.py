# -*- coding: utf-8 -*-
"""
系统配置模块 API：仅暴露安全的只读接口
"""

from django.urls import path

from .views import PublicEventInfoView

app_name = "system"

urlpatterns = [
    path("public/event/", PublicEventInfoView.as_view(), name="public-event"),
]
