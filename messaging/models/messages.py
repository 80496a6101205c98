import uuid

from django.db import models

from ..enums import MessageDirection, RecipientRole
from .accounts import WorkspaceMember
from .people import Person
from .threads import MessageThread

__all__ = ["Message", "MessageRecipient"]


class Message(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    external_id = models.CharField(max_length=255, unique=True)
    header_message_id = models.CharField(max_length=998, blank=True)
    subject = models.TextField(blank=True)
    date = models.DateTimeField()
    # Null only for orphan messages stored before their thread row existed
    message_thread = models.ForeignKey(
        MessageThread,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="messages",
    )
    message_thread_external_id = models.CharField(max_length=255, blank=True)
    direction = models.CharField(
        max_length=20,
        choices=MessageDirection.choices,
        default=MessageDirection.INCOMING,
    )
    body = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "messages"
        ordering = ["-date"]
        indexes = [
            models.Index(fields=["message_thread", "-date"], name="message_thread_date_idx"),
            models.Index(
                fields=["message_thread_external_id"], name="message_thread_ext_id_idx",
            ),
        ]

    def __str__(self):
        return f"{self.subject} - {self.get_direction_display()}"

    @property
    def is_orphan(self):
        return self.message_thread_id is None


class MessageRecipient(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    message = models.ForeignKey(
        Message, on_delete=models.CASCADE, related_name="recipients",
    )
    role = models.CharField(max_length=10, choices=RecipientRole.choices)
    handle = models.CharField(max_length=320, blank=True)
    display_name = models.CharField(max_length=200, blank=True)
    person = models.ForeignKey(
        Person,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="message_recipients",
    )
    workspace_member = models.ForeignKey(
        WorkspaceMember,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="message_recipients",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "message_recipients"

    def __str__(self):
        return f"{self.role}: {self.display_name or self.handle}"
