from __future__ import annotations

from django.urls import path

from .views import NotificationTeamListView, Phase2SelectionDispatchView, WorkshopInviteDispatchView

app_name = "notifications"

urlpatterns = [
    path("teams/", NotificationTeamListView.as_view(), name="teams"),
    path("workshop-invites/", WorkshopInviteDispatchView.as_view(), name="workshop-invites"),
    path("phase2-selections/", Phase2SelectionDispatchView.as_view(), name="phase2-selections"),
]
