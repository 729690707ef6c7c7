from rest_framework import viewsets, status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .models import Transaction
from .serializers import (
    TransactionSerializer,
    TransactionWithGroupSerializer,
    TransactionCreateSerializer,
    TransactionUpdateSerializer,
)
from .services import (
    create_transaction,
    get_transaction,
    list_group_transactions,
    update_transaction,
    delete_transaction,
)


class TransactionViewSet(viewsets.GenericViewSet):
    """
    ViewSet for expenses and repayments.

    list: Transactions of one group (?groupId=)
    create: Record a transaction
    retrieve: One transaction with its group
    update / partial_update: Edit a transaction (Joined members)
    destroy: Delete a transaction (payer, recorder or admin)
    """

    queryset = Transaction.objects.all()
    serializer_class = TransactionSerializer
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[OpenApiParameter('groupId', OpenApiTypes.INT, required=True)],
        responses={200: TransactionSerializer(many=True)},
    )
    def list(self, request):
        """List a group's transactions."""
        group_id = request.query_params.get('groupId')
        if not group_id:
            raise ValidationError('groupId query parameter is required')

        transactions = list_group_transactions(group_id=group_id, user=request.user)
        return Response(TransactionSerializer(transactions, many=True).data)

    @extend_schema(request=TransactionCreateSerializer, responses={201: TransactionSerializer})
    def create(self, request):
        """Record a transaction."""
        serializer = TransactionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        txn = create_transaction(
            group_id=data['group_id'],
            payer_id=data['payer_id'],
            amount=data['amount'],
            details=data['details'],
            description=data.get('description') or '',
            created_by=request.user,
        )
        return Response(TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: TransactionWithGroupSerializer})
    def retrieve(self, request, pk=None):
        """Get a transaction with its group."""
        txn = get_transaction(transaction_id=pk, user=request.user)
        return Response(TransactionWithGroupSerializer(txn).data)

    @extend_schema(request=TransactionUpdateSerializer, responses={200: OpenApiTypes.STR})
    def update(self, request, pk=None, partial=False):
        """Update a transaction."""
        serializer = TransactionUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        update_transaction(
            transaction_id=pk,
            updated_by=request.user,
            amount=data.get('amount'),
            description=data.get('description'),
            payer_id=data.get('payer_id'),
            details=data.get('details'),
        )
        return Response('Transaction updated')

    @extend_schema(request=TransactionUpdateSerializer, responses={200: OpenApiTypes.STR})
    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk, partial=True)

    @extend_schema(responses={200: OpenApiTypes.STR})
    def destroy(self, request, pk=None):
        """Delete a transaction."""
        delete_transaction(transaction_id=pk, deleted_by=request.user)
        return Response('Transaction deleted')
