from django.urls import path, re_path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView
from . import views

app_name = 'users'

router = DefaultRouter()
router.register(r'users', views.UserViewSet, basename='user')

# Paths used by the web client
user_create = views.UserViewSet.as_view({'post': 'create'})
user_groups = views.UserViewSet.as_view({'get': 'groups'})
user_delete = views.UserViewSet.as_view({'delete': 'destroy'})

urlpatterns = [
    # Authentication
    # POST   /api/v1/users/                  - Register
    # POST   /api/v1/users/login/            - Login
    # POST   /api/v1/users/token/refresh/    - Refresh access token
    path('users/token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),

    # User records
    # GET    /api/v1/users/{id}/             - Own user record
    # PUT    /api/v1/users/{id}/             - Update own user
    # PATCH  /api/v1/users/{id}/             - Partial update
    # DELETE /api/v1/users/{id}/             - Delete own account
    # GET    /api/v1/users/search/?q=        - Search users
    # GET    /api/v1/users/groups/           - Joined groups
    # GET    /api/v1/users/invites/          - Pending invites

    # Web client aliases
    # POST   /api/v1/Users/create            - Register
    # GET    /api/v1/Users/groups            - Joined groups
    # DELETE /api/v1/Users/{id}/delete       - Delete own account
    re_path(r'^Users/create/?$', user_create, name='client-user-create'),
    re_path(r'^Users/groups/?$', user_groups, name='client-user-groups'),
    re_path(r'^Users/(?P<pk>[^/.]+)/delete/?$', user_delete, name='client-user-delete'),

    path('', include(router.urls)),
]
