from django.urls import path, re_path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'transactions'

router = DefaultRouter()
router.register(r'transactions', views.TransactionViewSet, basename='transaction')

# Path used by the web client
transaction_add = views.TransactionViewSet.as_view({'post': 'create'})

urlpatterns = [
    # GET    /api/v1/transactions/?groupId=   - List a group's transactions
    # POST   /api/v1/transactions/            - Record a transaction
    # GET    /api/v1/transactions/{id}/       - Transaction with its group
    # PUT    /api/v1/transactions/{id}/       - Update transaction
    # PATCH  /api/v1/transactions/{id}/       - Partial update
    # DELETE /api/v1/transactions/{id}/       - Delete transaction

    # Web client alias
    # POST   /api/v1/Transactions/add         - Record a transaction
    re_path(r'^Transactions/add/?$', transaction_add, name='client-transaction-add'),

    path('', include(router.urls)),
]
