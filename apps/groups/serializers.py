from rest_framework import serializers
from .models import Group, GroupMember, GroupMemberStatus
from apps.accounts.serializers import UserSummarySerializer
from apps.transactions.serializers import TransactionSerializer


NAME_ERROR = 'Group name must be between 1 and 50 characters'
DESCRIPTION_ERROR = 'Group description must be less than 255 characters'

NAME_ERRORS = {
    'required': NAME_ERROR,
    'blank': NAME_ERROR,
    'null': NAME_ERROR,
    'max_length': NAME_ERROR,
}


# =============================================================================
# Output serializers
# =============================================================================

class GroupMemberSerializer(serializers.ModelSerializer):
    """Serializer for group membership rows."""

    groupId = serializers.IntegerField(source='group_id', read_only=True)
    memberId = serializers.CharField(source='member_id', read_only=True)
    member = UserSummarySerializer(read_only=True)
    invitedById = serializers.CharField(source='invited_by_id', read_only=True, allow_null=True)
    isAdmin = serializers.BooleanField(source='is_admin', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = GroupMember
        fields = [
            'id',
            'groupId',
            'memberId',
            'member',
            'invitedById',
            'isAdmin',
            'status',
            'createdAt',
            'updatedAt',
        ]
        read_only_fields = fields


class GroupSummarySerializer(serializers.ModelSerializer):
    """Group fields without nested collections."""

    createdById = serializers.CharField(source='created_by_id', read_only=True)
    createdBy = UserSummarySerializer(source='created_by', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Group
        fields = ['id', 'name', 'description', 'createdById', 'createdBy', 'createdAt', 'updatedAt']
        read_only_fields = fields


class GroupListSerializer(GroupSummarySerializer):
    """A user's group, with its members."""

    groupMembers = GroupMemberSerializer(source='group_members', many=True, read_only=True)

    class Meta(GroupSummarySerializer.Meta):
        fields = [*GroupSummarySerializer.Meta.fields, 'groupMembers']
        read_only_fields = fields


class GroupSerializer(GroupListSerializer):
    """Full group view with members and transactions."""

    transactions = TransactionSerializer(many=True, read_only=True)

    class Meta(GroupListSerializer.Meta):
        fields = [*GroupListSerializer.Meta.fields, 'transactions']
        read_only_fields = fields


class GroupInviteSerializer(GroupMemberSerializer):
    """A pending invite, with the group and the inviter."""

    group = GroupSummarySerializer(read_only=True)
    invitedBy = UserSummarySerializer(source='invited_by', read_only=True, allow_null=True)

    class Meta(GroupMemberSerializer.Meta):
        fields = [*GroupMemberSerializer.Meta.fields, 'group', 'invitedBy']
        read_only_fields = fields


class MemberBalanceSerializer(serializers.Serializer):
    userId = serializers.CharField(source='user.id', read_only=True)
    user = UserSummarySerializer(read_only=True)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class SettlementSerializer(serializers.Serializer):
    fromUserId = serializers.CharField(source='from_user.id', read_only=True)
    fromUser = UserSummarySerializer(source='from_user', read_only=True)
    toUserId = serializers.CharField(source='to_user.id', read_only=True)
    toUser = UserSummarySerializer(source='to_user', read_only=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class GroupBalancesSerializer(serializers.Serializer):
    balances = MemberBalanceSerializer(many=True, read_only=True)
    settlements = SettlementSerializer(many=True, read_only=True)


# =============================================================================
# Input serializers
# =============================================================================

class InvitedMemberSerializer(serializers.Serializer):
    id = serializers.CharField()
    role = serializers.ChoiceField(choices=['admin', 'member'], default='member')


class GroupCreateSerializer(serializers.Serializer):
    """Serializer for creating groups."""

    name = serializers.CharField(max_length=50, error_messages=NAME_ERRORS)
    description = serializers.CharField(
        max_length=255,
        required=False,
        allow_blank=True,
        allow_null=True,
        error_messages={'max_length': DESCRIPTION_ERROR},
    )
    invitedMembers = InvitedMemberSerializer(source='invited_members', many=True, required=False)


class GroupUpdateSerializer(serializers.Serializer):
    """Serializer for updating groups. Missing fields are left unchanged."""

    name = serializers.CharField(max_length=50, required=False, error_messages=NAME_ERRORS)
    description = serializers.CharField(
        max_length=255,
        required=False,
        allow_blank=True,
        error_messages={'max_length': DESCRIPTION_ERROR},
    )


class AddMembersSerializer(serializers.Serializer):
    """Plain user ids, or invites carrying a role."""

    memberIds = serializers.ListField(
        source='member_ids',
        child=serializers.CharField(),
        required=False,
        default=list,
    )
    invitedMembers = InvitedMemberSerializer(source='invited_members', many=True, required=False)

    def to_internal_value(self, data):
        # The web client sends the PascalCase key
        if 'InvitedMembers' in data and 'invitedMembers' not in data:
            data = {**data, 'invitedMembers': data['InvitedMembers']}
        return super().to_internal_value(data)


class MemberStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=GroupMemberStatus.choices,
        error_messages={'invalid_choice': 'Invalid status', 'required': 'Invalid status'},
    )


class TransferOwnershipSerializer(serializers.Serializer):
    newOwnerId = serializers.CharField(source='new_owner_id')
