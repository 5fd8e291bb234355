# -*- coding: utf-8 -*-
from django.urls import path

from .views import LoginView, MeView, TokenRefreshView

app_name = "spark_auth"

urlpatterns = [
    path("login/", LoginView.as_view(), name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("me/", MeView.as_view(), name="me"),
]
