import uuid

from django.db import models

from ..enums import ThreadVisibility
from .channels import MessageChannel

__all__ = ["MessageThread"]


class MessageThread(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    external_id = models.CharField(max_length=255)
    subject = models.TextField(blank=True)
    message_channel = models.ForeignKey(
        MessageChannel, on_delete=models.CASCADE, related_name="message_threads",
    )
    visibility = models.CharField(
        max_length=20,
        choices=ThreadVisibility.choices,
        default=ThreadVisibility.DEFAULT,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "message_threads"
        constraints = [
            models.UniqueConstraint(
                fields=["message_channel", "external_id"],
                name="message_thread_channel_external_id_uniq",
            ),
        ]

    def __str__(self):
        return f"Thread: {self.external_id}"
