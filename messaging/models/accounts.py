import uuid

from django.db import models

from ..enums import Provider
from .fields import EncryptedCharField

__all__ = ["WorkspaceMember", "ConnectedAccount"]


class WorkspaceMember(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, blank=True)
    email = models.EmailField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "workspace_members"

    def __str__(self):
        return self.name or self.email


class ConnectedAccount(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    provider = models.CharField(
        max_length=20, choices=Provider.choices, default=Provider.GMAIL,
    )
    handle = models.EmailField(help_text="Mailbox address at the provider")
    access_token = EncryptedCharField(max_length=1000, blank=True, null=True)
    refresh_token = EncryptedCharField(max_length=1000, blank=True, null=True)
    workspace_member = models.ForeignKey(
        WorkspaceMember, on_delete=models.CASCADE, related_name="connected_accounts",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "connected_accounts"

    def __str__(self):
        return f"{self.handle} ({self.get_provider_display()})"

    @property
    def has_refresh_token(self):
        return bool(self.refresh_token)
