from django.urls import path

from .views import AdminSubmissionListView, ResultsView, ScoreboardView, ScoreView

app_name = "scoring"

urlpatterns = [
    path("scoreboard/", ScoreboardView.as_view(), name="scoreboard"),
    path("results/", ResultsView.as_view(), name="results"),
    path("submissions/", AdminSubmissionListView.as_view(), name="submission-list"),
    path("submissions/<int:submission_id>/score/", ScoreView.as_view(), name="submission-score"),
]
