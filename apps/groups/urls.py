from django.urls import path, re_path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'groups'

# Router for ViewSets
router = DefaultRouter()
router.register(r'groups', views.GroupViewSet, basename='group')

# Paths used by the web client
group_create = views.GroupViewSet.as_view({'post': 'create'})
group_detail = views.GroupViewSet.as_view({'get': 'retrieve'})
group_add_members = views.GroupViewSet.as_view({'post': 'add_members'})

urlpatterns = [
    # Group ViewSet routes
    # GET    /api/v1/groups/                          - List user's groups
    # POST   /api/v1/groups/                          - Create group
    # GET    /api/v1/groups/{id}/                     - Get group details
    # PUT    /api/v1/groups/{id}/                     - Update group (admin)
    # PATCH  /api/v1/groups/{id}/                     - Partial update (admin)
    # DELETE /api/v1/groups/{id}/                     - Delete group (creator)

    # Membership actions
    # POST   /api/v1/groups/{id}/members/                   - Invite users
    # POST   /api/v1/groups/{id}/leave/                     - Leave group
    # DELETE /api/v1/groups/{id}/members/{userId}/          - Kick member (admin)
    # PUT    /api/v1/groups/{id}/members/{userId}/status/   - Change member status
    # PUT    /api/v1/groups/{id}/members/{userId}/promote/  - Promote to admin (admin)
    # PUT    /api/v1/groups/{id}/members/{userId}/demote/   - Demote admin (creator)
    # PUT    /api/v1/groups/{id}/owner/                     - Transfer ownership (creator)
    # GET    /api/v1/groups/{id}/balances/                  - Balances and settlements

    # Web client aliases
    # POST   /api/v1/Groups/create                   - Create group
    # POST   /api/v1/Groups/{id}/addmembers          - Invite users ({InvitedMembers: [{id, role}]})
    # GET    /api/v1/Groups/{id}                     - Get group details
    re_path(r'^Groups/create/?$', group_create, name='client-group-create'),
    re_path(r'^Groups/(?P<pk>[^/.]+)/addmembers/?$', group_add_members, name='client-group-add-members'),
    re_path(r'^Groups/(?P<pk>[^/.]+)/?$', group_detail, name='client-group-detail'),

    path('', include(router.urls)),
]
