from django.contrib import admin

from .config import get_config
from .models import (
    ConnectedAccount,
    Message,
    MessageChannel,
    MessageRecipient,
    MessageThread,
    WorkspaceDataSource,
)


class WorkspaceStoreMixin:
    """Point an admin at the workspace store instead of the default database.

    Tenant tables live under a per-workspace database alias; the admin serves
    the one named by the ADMIN_DATABASE setting.
    """

    @property
    def using(self):
        return get_config("ADMIN_DATABASE")

    def get_queryset(self, request):
        return super().get_queryset(request).using(self.using)

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        return super().formfield_for_foreignkey(db_field, request, using=self.using, **kwargs)

    def formfield_for_manytomany(self, db_field, request, **kwargs):
        return super().formfield_for_manytomany(db_field, request, using=self.using, **kwargs)


class WorkspaceStoreAdmin(WorkspaceStoreMixin, admin.ModelAdmin):
    def save_model(self, request, obj, form, change):
        obj.save(using=self.using)

    def delete_model(self, request, obj):
        obj.delete(using=self.using)

    def delete_queryset(self, request, queryset):
        queryset.using(self.using).delete()


@admin.register(WorkspaceDataSource)
class WorkspaceDataSourceAdmin(admin.ModelAdmin):
    list_display = ["workspace_id", "database_alias", "schema", "created_at"]
    search_fields = ["workspace_id", "schema"]


@admin.register(ConnectedAccount)
class ConnectedAccountAdmin(WorkspaceStoreAdmin):
    list_display = ["handle", "provider", "workspace_member", "has_refresh_token", "updated_at"]
    list_filter = ["provider"]
    search_fields = ["handle"]
    # Tokens are never shown in the admin
    exclude = ["access_token", "refresh_token"]

    @admin.display(boolean=True)
    def has_refresh_token(self, obj):
        return obj.has_refresh_token


@admin.register(MessageChannel)
class MessageChannelAdmin(WorkspaceStoreAdmin):
    list_display = ["handle", "type", "connected_account", "created_at"]


class MessageRecipientInline(WorkspaceStoreMixin, admin.TabularInline):
    model = MessageRecipient
    extra = 0
    readonly_fields = ["role", "handle", "display_name", "person", "workspace_member"]
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(MessageThread)
class MessageThreadAdmin(WorkspaceStoreAdmin):
    list_display = ["external_id", "subject", "message_channel", "visibility", "created_at"]
    search_fields = ["external_id", "subject"]
    readonly_fields = ["external_id", "message_channel", "created_at"]


@admin.register(Message)
class MessageAdmin(WorkspaceStoreAdmin):
    list_display = ["subject", "external_id", "direction", "date", "is_orphan"]
    list_filter = ["direction"]
    search_fields = ["external_id", "header_message_id", "subject"]
    readonly_fields = [
        "external_id",
        "header_message_id",
        "message_thread",
        "message_thread_external_id",
        "date",
        "created_at",
    ]
    inlines = [MessageRecipientInline]

    @admin.display(boolean=True)
    def is_orphan(self, obj):
        return obj.is_orphan
