# backups/api/urls.py

from django.urls import path

from backups.api.views import BackupDetailView, BackupListCreateView, BackupRestoreView

urlpatterns = [
    path("", BackupListCreateView.as_view(), name="backups"),
    path("<str:filename>/", BackupDetailView.as_view(), name="backup-detail"),
    path("<str:filename>/restore/", BackupRestoreView.as_view(), name="backup-restore"),
]
