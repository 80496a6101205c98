import uuid

from django.db import models

from ..enums import ChannelType
from .accounts import ConnectedAccount

__all__ = ["MessageChannel"]


class MessageChannel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    connected_account = models.ForeignKey(
        ConnectedAccount, on_delete=models.CASCADE, related_name="message_channels",
    )
    handle = models.EmailField()
    type = models.CharField(
        max_length=20, choices=ChannelType.choices, default=ChannelType.EMAIL,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "message_channels"

    def __str__(self):
        return f"Channel: {self.handle}"
