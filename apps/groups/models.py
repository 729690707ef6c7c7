# ==========================================
# apps/groups/models.py
# ==========================================

from django.db import models


class GroupMemberStatus(models.TextChoices):
    INVITED = 'Invited', 'Invited'
    JOINED = 'Joined', 'Joined'
    LEFT = 'Left', 'Left'
    DECLINED = 'Declined', 'Declined'
    KICKED = 'Kicked', 'Kicked'
    BANNED = 'Banned', 'Banned'


class Group(models.Model):
    """A set of users sharing expenses."""

    name = models.CharField(max_length=50)
    description = models.CharField(max_length=255, blank=True, default='')
    # Owners must transfer the group before deleting their account
    created_by = models.ForeignKey('accounts.User', on_delete=models.PROTECT, related_name='created_groups')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'groups'
        indexes = [
            models.Index(fields=['created_by', 'created_at'], name='groups_creator_created_idx'),
        ]
        ordering = ['created_at', 'id']

    def __str__(self):
        return self.name

    def get_membership(self, user):
        try:
            return self.group_members.get(member=user)
        except GroupMember.DoesNotExist:
            return None

    def is_creator(self, user):
        return self.created_by_id == user.pk

    def is_joined(self, user):
        """Only Joined members count as being in the group."""
        return self.group_members.filter(member=user, status=GroupMemberStatus.JOINED).exists()

    def is_admin(self, user):
        return self.group_members.filter(
            member=user,
            status=GroupMemberStatus.JOINED,
            is_admin=True,
        ).exists()


class GroupMember(models.Model):
    """A user's membership record in a group, whatever its status."""

    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='group_members')
    member = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='group_memberships')
    invited_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_invites',
    )
    is_admin = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=GroupMemberStatus.choices, default=GroupMemberStatus.INVITED)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'group_members'
        unique_together = [['group', 'member']]
        indexes = [
            models.Index(fields=['group', 'status'], name='group_members_status_idx'),
            models.Index(fields=['member', 'status'], name='group_members_member_idx'),
        ]
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.member} in {self.group.name} ({self.status})"

    @property
    def is_joined(self):
        return self.status == GroupMemberStatus.JOINED

    def set_status(self, status):
        """
        Move the membership to ``status``.

        Admin rights only survive while Joined. A pending invite keeps the
        role it was sent with.
        """
        self.status = status
        if status not in (GroupMemberStatus.JOINED, GroupMemberStatus.INVITED):
            self.is_admin = False
        self.save(update_fields=['status', 'is_admin', 'updated_at'])
