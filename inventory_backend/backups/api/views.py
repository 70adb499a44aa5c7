# backups/api/views.py

"""
BACKUP ENDPOINTS (admin only)

- GET    /api/backups/                    list (newest first)
- POST   /api/backups/                    create now (+ prune to retention)
- DELETE /api/backups/<filename>/
- POST   /api/backups/<filename>/restore/
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backups.services import (
    delete_backup,
    list_backups,
    restore_backup,
    run_scheduled_backup,
)
from core.api import error_response
from core.exceptions import InventoryAppError
from permissions.roles import CAP_BACKUP_MANAGE, HasCapability


class _BackupPermissionMixin:
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_BACKUP_MANAGE


class BackupListCreateView(_BackupPermissionMixin, APIView):
    @extend_schema(tags=["backups"])
    def get(self, request):
        data = [info.as_dict() for info in list_backups()]
        return Response({"count": len(data), "results": data})

    @extend_schema(tags=["backups"], request=None)
    def post(self, request):
        try:
            info = run_scheduled_backup()
        except InventoryAppError as exc:
            return error_response(exc)
        return Response(info.as_dict(), status=status.HTTP_201_CREATED)


class BackupDetailView(_BackupPermissionMixin, APIView):
    @extend_schema(tags=["backups"])
    def delete(self, request, filename):
        try:
            delete_backup(filename)
        except InventoryAppError as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


class BackupRestoreView(_BackupPermissionMixin, APIView):
    @extend_schema(tags=["backups"], request=None)
    def post(self, request, filename):
        try:
            info = restore_backup(filename)
        except InventoryAppError as exc:
            return error_response(exc)
        return Response({"detail": "Database restored", "backup": info.as_dict()})
