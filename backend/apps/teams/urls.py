from django.urls import path

from .views import (
    ConfirmPaymentView,
    MemberUpdateView,
    MyTeamView,
    PaymentLogView,
    Phase2SelectionView,
    TeamRegisterView,
)

app_name = "teams"

urlpatterns = [
    path("", TeamRegisterView.as_view(), name="register"),
    path("me/", MyTeamView.as_view(), name="mine"),
    path("me/members/<int:index>/", MemberUpdateView.as_view(), name="member-update"),
    path("payments/", PaymentLogView.as_view(), name="payments"),
    path("<int:team_id>/phase2-selection/", Phase2SelectionView.as_view(), name="phase2-selection"),
    path("<int:team_id>/confirm-payment/", ConfirmPaymentView.as_view(), name="confirm-payment"),
]
