# ==========================================
# apps/groups/admin.py
# ==========================================

from django.contrib import admin
from apps.groups.models import Group, GroupMember


class GroupMemberInline(admin.TabularInline):
    """Inline admin for group members."""
    model = GroupMember
    fk_name = 'group'
    extra = 0
    fields = ['member', 'status', 'is_admin', 'invited_by', 'created_at']
    readonly_fields = ['created_at']
    raw_id_fields = ['member', 'invited_by']


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    """Admin interface for Groups."""

    list_display = [
        'name',
        'created_by',
        'member_count',
        'created_at'
    ]
    list_filter = ['created_at']
    search_fields = ['name', 'description', 'created_by__email', 'created_by__username']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['created_by']
    inlines = [GroupMemberInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'description', 'created_by')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    @admin.display(description='Joined members')
    def member_count(self, obj):
        return obj.group_members.filter(status='Joined').count()


@admin.register(GroupMember)
class GroupMemberAdmin(admin.ModelAdmin):
    """Admin interface for Group Members."""

    list_display = ['member', 'group', 'status', 'is_admin', 'invited_by', 'updated_at']
    list_filter = ['status', 'is_admin', 'created_at']
    search_fields = ['member__email', 'member__username', 'group__name']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['group', 'member', 'invited_by']
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('member', 'group', 'invited_by')
