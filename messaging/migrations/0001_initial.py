import uuid

import django.db.models.deletion
from django.db import migrations, models

import messaging.models.fields


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="WorkspaceDataSource",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("workspace_id", models.UUIDField(db_index=True)),
                ("database_alias", models.CharField(max_length=100)),
                ("schema", models.CharField(max_length=63)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "workspace_data_sources",
                "ordering": ["-created_at", "-id"],
                "get_latest_by": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="WorkspaceMember",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(blank=True, max_length=200)),
                ("email", models.EmailField(max_length=254)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"db_table": "workspace_members"},
        ),
        migrations.CreateModel(
            name="Person",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("email", models.EmailField(db_index=True, max_length=254)),
                ("first_name", models.CharField(blank=True, max_length=100)),
                ("last_name", models.CharField(blank=True, max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"db_table": "people", "ordering": ["created_at"]},
        ),
        migrations.CreateModel(
            name="ConnectedAccount",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("provider", models.CharField(choices=[("gmail", "Gmail")], default="gmail", max_length=20)),
                ("handle", models.EmailField(help_text="Mailbox address at the provider", max_length=254)),
                ("access_token", messaging.models.fields.EncryptedCharField(blank=True, max_length=1000, null=True)),
                ("refresh_token", messaging.models.fields.EncryptedCharField(blank=True, max_length=1000, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "workspace_member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="connected_accounts",
                        to="messaging.workspacemember",
                    ),
                ),
            ],
            options={"db_table": "connected_accounts"},
        ),
        migrations.CreateModel(
            name="MessageChannel",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("handle", models.EmailField(max_length=254)),
                ("type", models.CharField(choices=[("email", "Email")], default="email", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "connected_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="message_channels",
                        to="messaging.connectedaccount",
                    ),
                ),
            ],
            options={"db_table": "message_channels"},
        ),
        migrations.CreateModel(
            name="MessageThread",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("external_id", models.CharField(max_length=255)),
                ("subject", models.TextField(blank=True)),
                (
                    "visibility",
                    models.CharField(
                        choices=[
                            ("default", "Default"),
                            ("metadata", "Metadata only"),
                            ("share_everything", "Share everything"),
                        ],
                        default="default",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "message_channel",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="message_threads",
                        to="messaging.messagechannel",
                    ),
                ),
            ],
            options={"db_table": "message_threads"},
        ),
        migrations.AddConstraint(
            model_name="messagethread",
            constraint=models.UniqueConstraint(
                fields=("message_channel", "external_id"),
                name="message_thread_channel_external_id_uniq",
            ),
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("external_id", models.CharField(max_length=255, unique=True)),
                ("header_message_id", models.CharField(blank=True, max_length=998)),
                ("subject", models.TextField(blank=True)),
                ("date", models.DateTimeField()),
                ("message_thread_external_id", models.CharField(blank=True, max_length=255)),
                (
                    "direction",
                    models.CharField(
                        choices=[("incoming", "Incoming"), ("outgoing", "Outgoing")],
                        default="incoming",
                        max_length=20,
                    ),
                ),
                ("body", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "message_thread",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="messaging.messagethread",
                    ),
                ),
            ],
            options={"db_table": "messages", "ordering": ["-date"]},
        ),
        migrations.AddIndex(
            model_name="message",
            index=models.Index(fields=["message_thread", "-date"], name="message_thread_date_idx"),
        ),
        migrations.AddIndex(
            model_name="message",
            index=models.Index(fields=["message_thread_external_id"], name="message_thread_ext_id_idx"),
        ),
        migrations.CreateModel(
            name="MessageRecipient",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "role",
                    models.CharField(
                        choices=[("from", "From"), ("to", "To"), ("cc", "Cc"), ("bcc", "Bcc")],
                        max_length=10,
                    ),
                ),
                ("handle", models.CharField(blank=True, max_length=320)),
                ("display_name", models.CharField(blank=True, max_length=200)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "message",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="recipients",
                        to="messaging.message",
                    ),
                ),
                (
                    "person",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="message_recipients",
                        to="messaging.person",
                    ),
                ),
                (
                    "workspace_member",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="message_recipients",
                        to="messaging.workspacemember",
                    ),
                ),
            ],
            options={"db_table": "message_recipients"},
        ),
    ]
