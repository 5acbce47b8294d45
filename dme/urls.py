from django.urls import path
from .views import NoteExtractView, SubmissionDetailView, SubmissionRetryView

urlpatterns = [
    path('notes/extract/', NoteExtractView.as_view(), name='note-extract'),
    path('submissions/<uuid:submission_id>/', SubmissionDetailView.as_view(), name='submission-detail'),
    path('submissions/<uuid:submission_id>/retry/', SubmissionRetryView.as_view(), name='submission-retry'),
]
