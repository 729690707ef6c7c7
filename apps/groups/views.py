from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema

from .models import Group
from .serializers import (
    GroupSerializer,
    GroupListSerializer,
    GroupCreateSerializer,
    GroupUpdateSerializer,
    GroupBalancesSerializer,
    AddMembersSerializer,
    MemberStatusSerializer,
    TransferOwnershipSerializer,
)

from apps.groups.services import (
    create_group,
    get_group_detail,
    update_group,
    delete_group,
    get_user_groups,
    add_members,
    leave_group,
    remove_member,
    change_member_status,
    promote_member,
    demote_member,
    transfer_ownership,
    get_group_balances,
)


MEMBER_ID_PATTERN = r'(?P<member_id>[^/.]+)'


class GroupViewSet(viewsets.GenericViewSet):
    """
    ViewSet for groups and their membership.

    All business logic is handled by services, which raise API exceptions
    for every rule violation. Views are thin HTTP handlers only.

    list: Groups the user has Joined
    create: Create a group, optionally inviting members
    retrieve: Group with members and transactions (Joined members)
    update / partial_update: Rename or describe a group (admins)
    destroy: Delete a group (creator only)
    """

    queryset = Group.objects.all()
    serializer_class = GroupSerializer
    permission_classes = [IsAuthenticated]

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'list':
            return GroupListSerializer
        elif self.action == 'create':
            return GroupCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return GroupUpdateSerializer
        return GroupSerializer

    def list(self, request):
        """List the user's groups."""
        groups = get_user_groups(user=request.user)
        return Response(GroupListSerializer(groups, many=True).data)

    @extend_schema(request=GroupCreateSerializer, responses={201: GroupSerializer})
    def create(self, request):
        """Create a new group."""
        serializer = GroupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        group = create_group(
            name=serializer.validated_data['name'],
            description=serializer.validated_data.get('description') or '',
            invited_members=serializer.validated_data.get('invited_members'),
            created_by=request.user,
        )

        group = get_group_detail(group_id=group.pk, user=request.user)
        return Response(GroupSerializer(group).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        """Get a group with members and transactions."""
        group = get_group_detail(group_id=pk, user=request.user)
        return Response(GroupSerializer(group).data)

    @extend_schema(request=GroupUpdateSerializer, responses={200: OpenApiTypes.STR})
    def update(self, request, pk=None, partial=False):
        """Update group name and/or description."""
        serializer = GroupUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        update_group(
            group_id=pk,
            updated_by=request.user,
            name=serializer.validated_data.get('name'),
            description=serializer.validated_data.get('description'),
        )
        return Response('Group updated')

    @extend_schema(request=GroupUpdateSerializer, responses={200: OpenApiTypes.STR})
    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk, partial=True)

    @extend_schema(responses={200: OpenApiTypes.STR})
    def destroy(self, request, pk=None):
        """Delete a group."""
        delete_group(group_id=pk, deleted_by=request.user)
        return Response('Group deleted')

    @extend_schema(request=AddMembersSerializer, responses={200: OpenApiTypes.STR})
    @action(detail=True, methods=['post'], url_path='members', url_name='members')
    def add_members(self, request, pk=None):
        """Invite users to the group."""
        serializer = AddMembersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        invited = data.get('invited_members') or []

        count = add_members(
            group_id=pk,
            member_ids=[*data['member_ids'], *(invite['id'] for invite in invited)],
            admin_ids={invite['id'] for invite in invited if invite['role'] == 'admin'},
            added_by=request.user,
        )
        return Response(f"{count} members added to the group")

    @extend_schema(request=None, responses={200: OpenApiTypes.STR})
    @action(detail=True, methods=['post'])
    def leave(self, request, pk=None):
        """Leave a group."""
        leave_group(group_id=pk, user=request.user)
        return Response('You have left the group')

    @extend_schema(request=None, responses={200: OpenApiTypes.STR})
    @action(detail=True, methods=['delete'], url_path=f'members/{MEMBER_ID_PATTERN}', url_name='remove-member')
    def remove_member(self, request, pk=None, member_id=None):
        """Kick a member from the group (admin only)."""
        remove_member(group_id=pk, member_id=member_id, removed_by=request.user)
        return Response('Member removed from group')

    @extend_schema(request=MemberStatusSerializer, responses={200: OpenApiTypes.STR})
    @action(detail=True, methods=['put', 'patch'], url_path=f'members/{MEMBER_ID_PATTERN}/status', url_name='member-status')
    def member_status(self, request, pk=None, member_id=None):
        """Accept or decline an invite, or kick, ban and unban members."""
        serializer = MemberStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        change_member_status(
            group_id=pk,
            member_id=member_id,
            new_status=serializer.validated_data['status'],
            changed_by=request.user,
        )
        return Response('Member status updated')

    @extend_schema(request=None, responses={200: OpenApiTypes.STR})
    @action(detail=True, methods=['put', 'post'], url_path=f'members/{MEMBER_ID_PATTERN}/promote', url_name='promote-member')
    def promote_member(self, request, pk=None, member_id=None):
        """Promote a member to admin."""
        promote_member(group_id=pk, member_id=member_id, promoted_by=request.user)
        return Response('Member promoted to admin')

    @extend_schema(request=None, responses={200: OpenApiTypes.STR})
    @action(detail=True, methods=['put', 'post'], url_path=f'members/{MEMBER_ID_PATTERN}/demote', url_name='demote-member')
    def demote_member(self, request, pk=None, member_id=None):
        """Demote an admin to member (creator only)."""
        demote_member(group_id=pk, member_id=member_id, demoted_by=request.user)
        return Response('Admin demoted to member')

    @extend_schema(request=TransferOwnershipSerializer, responses={200: OpenApiTypes.STR})
    @action(detail=True, methods=['put', 'post'], url_path='owner', url_name='transfer-ownership')
    def transfer_ownership(self, request, pk=None):
        """Hand the group over to another member (creator only)."""
        serializer = TransferOwnershipSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        transfer_ownership(
            group_id=pk,
            new_owner_id=serializer.validated_data['new_owner_id'],
            transferred_by=request.user,
        )
        return Response('Ownership transferred')

    @extend_schema(responses={200: GroupBalancesSerializer})
    @action(detail=True, methods=['get'])
    def balances(self, request, pk=None):
        """Net balance per member and suggested settlements."""
        data = get_group_balances(group_id=pk, user=request.user)
        return Response(GroupBalancesSerializer(data).data)
