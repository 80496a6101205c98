from django.db import models

__all__ = ["WorkspaceDataSource"]


class WorkspaceDataSource(models.Model):
    """Maps a workspace to the database alias and schema holding its tables.

    Lives in the ``default`` database. A workspace may be re-provisioned, in
    which case the most recent row is authoritative.
    """

    workspace_id = models.UUIDField(db_index=True)
    database_alias = models.CharField(max_length=100)
    schema = models.CharField(max_length=63)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "workspace_data_sources"
        ordering = ["-created_at", "-id"]
        get_latest_by = ["created_at", "id"]

    def __str__(self):
        return f"{self.workspace_id} -> {self.database_alias}.{self.schema}"
