import uuid

from django.db import models

__all__ = ["Person"]


class Person(models.Model):
    """Contact record; the sync engine only reads it to link senders."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(db_index=True)
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "people"
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.full_name} <{self.email}>" if self.full_name else self.email

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()
