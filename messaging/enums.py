from django.db import models


class Provider(models.TextChoices):
    GMAIL = "gmail", "Gmail"


class ChannelType(models.TextChoices):
    EMAIL = "email", "Email"


class ThreadVisibility(models.TextChoices):
    DEFAULT = "default", "Default"
    METADATA = "metadata", "Metadata only"
    SHARE_EVERYTHING = "share_everything", "Share everything"


class MessageDirection(models.TextChoices):
    INCOMING = "incoming", "Incoming"
    OUTGOING = "outgoing", "Outgoing"


class RecipientRole(models.TextChoices):
    FROM = "from", "From"
    TO = "to", "To"
    CC = "cc", "Cc"
    BCC = "bcc", "Bcc"
