from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.groups.serializers import GroupListSerializer, GroupInviteSerializer
from apps.groups.services import get_user_groups, get_user_invites

from .models import User
from .serializers import (
    UserSerializer,
    UserRegistrationSerializer,
    UserUpdateSerializer,
    UserLoginSerializer,
    UserSearchResultSerializer,
    AuthResponseSerializer,
)
from .services import (
    register_user,
    authenticate_user,
    get_own_user,
    update_user,
    delete_user,
    search_users,
)


def auth_payload(user):
    """User record plus a fresh JWT pair."""
    refresh = RefreshToken.for_user(user)
    return {
        'user': UserSerializer(user).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }
    }


class UserViewSet(viewsets.GenericViewSet):
    """
    ViewSet for user accounts.

    create: Register (anonymous)
    login: Exchange email and password for tokens (anonymous)
    retrieve / update / partial_update / destroy: The caller's own record
    search: Find other users to invite
    groups: Groups the caller has Joined
    invites: Pending invites for the caller
    """

    queryset = User.objects.filter(is_active=True)
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        """Registration and login are open."""
        if self.action in ['create', 'login']:
            return [AllowAny()]
        return [IsAuthenticated()]

    @extend_schema(
        request=UserRegistrationSerializer,
        responses={201: AuthResponseSerializer},
        description="Register a new user account and receive JWT tokens.",
        tags=['auth'],
    )
    def create(self, request):
        """Register a new user account."""
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = register_user(**serializer.validated_data)
        return Response(auth_payload(user), status=status.HTTP_201_CREATED)

    @extend_schema(
        request=UserLoginSerializer,
        responses={200: AuthResponseSerializer},
        description="Authenticate with email and password to receive JWT tokens.",
        tags=['auth'],
    )
    @action(detail=False, methods=['post'])
    def login(self, request):
        """Login with email and password."""
        serializer = UserLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate_user(**serializer.validated_data)
        return Response(auth_payload(user))

    def retrieve(self, request, pk=None):
        """Get the caller's own user record."""
        user = get_own_user(user_id=pk, requested_by=request.user)
        return Response(UserSerializer(user).data)

    @extend_schema(request=UserUpdateSerializer, responses={200: OpenApiTypes.STR})
    def update(self, request, pk=None, partial=False):
        """Update the caller's profile."""
        serializer = UserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        update_user(user_id=pk, updated_by=request.user, **serializer.validated_data)
        return Response('User updated')

    @extend_schema(request=UserUpdateSerializer, responses={200: OpenApiTypes.STR})
    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk, partial=True)

    @extend_schema(responses={200: OpenApiTypes.STR})
    def destroy(self, request, pk=None):
        """Delete the caller's account."""
        delete_user(user_id=pk, deleted_by=request.user)
        return Response('User deleted')

    @extend_schema(
        parameters=[OpenApiParameter('q', OpenApiTypes.STR, description='Username or name fragment')],
        responses={200: UserSearchResultSerializer(many=True)},
    )
    @action(detail=False, methods=['get'])
    def search(self, request):
        """Search other users by username or name."""
        users = search_users(query=request.query_params.get('q', ''), requested_by=request.user)
        return Response(UserSearchResultSerializer(users, many=True).data)

    @extend_schema(responses={200: GroupListSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def groups(self, request):
        """Groups the caller has Joined."""
        groups = get_user_groups(user=request.user)
        return Response(GroupListSerializer(groups, many=True).data)

    @extend_schema(responses={200: GroupInviteSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def invites(self, request):
        """Pending invites for the caller."""
        invites = get_user_invites(user=request.user)
        return Response(GroupInviteSerializer(invites, many=True).data)
