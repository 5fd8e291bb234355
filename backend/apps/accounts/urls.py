from django.urls import path

from .views import ProfileView, RegisterView

app_name = "accounts"

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("me/profile/", ProfileView.as_view(), name="profile"),
]
