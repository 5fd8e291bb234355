from django.urls import path

from .views import CountdownView, Phase1SubmissionView, Phase1VideoLinkView, Phase2SubmissionView

app_name = "submissions"

urlpatterns = [
    path("phase1/", Phase1SubmissionView.as_view(), name="phase1"),
    path("phase1/video-link/", Phase1VideoLinkView.as_view(), name="phase1-video-link"),
    path(
        "phase1/countdown/",
        CountdownView.as_view(deadline_key="PHASE1_VIDEO_DEADLINE"),
        name="phase1-countdown",
    ),
    path("phase2/", Phase2SubmissionView.as_view(), name="phase2"),
    path("phase2/countdown/", CountdownView.as_view(deadline_key="PHASE2_DEADLINE"), name="phase2-countdown"),
]
