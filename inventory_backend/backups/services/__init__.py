from .backup_service import (
    BackupInfo,
    create_backup,
    delete_backup,
    list_backups,
    prune_backups,
    restore_backup,
    run_scheduled_backup,
)

__all__ = [
    "BackupInfo",
    "create_backup",
    "delete_backup",
    "list_backups",
    "prune_backups",
    "restore_backup",
    "run_scheduled_backup",
]
