from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer
from .models import Transaction, TransactionDetail


AMOUNT_FIELD_KWARGS = {'max_digits': 12, 'decimal_places': 2}


# =============================================================================
# Output serializers
# =============================================================================

class TransactionDetailSerializer(serializers.ModelSerializer):
    """One recipient's share of a transaction."""

    transactionId = serializers.IntegerField(source='transaction_id', read_only=True)
    recipientId = serializers.CharField(source='recipient_id', read_only=True, allow_null=True)
    recipient = UserSummarySerializer(read_only=True, allow_null=True)
    amount = serializers.DecimalField(read_only=True, **AMOUNT_FIELD_KWARGS)

    class Meta:
        model = TransactionDetail
        fields = ['id', 'transactionId', 'recipientId', 'recipient', 'amount']
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    """Transaction with payer, creator and details."""

    amount = serializers.DecimalField(read_only=True, **AMOUNT_FIELD_KWARGS)
    createdById = serializers.CharField(source='created_by_id', read_only=True, allow_null=True)
    createdBy = UserSummarySerializer(source='created_by', read_only=True, allow_null=True)
    payerId = serializers.CharField(source='payer_id', read_only=True, allow_null=True)
    payer = UserSummarySerializer(read_only=True, allow_null=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    groupId = serializers.IntegerField(source='group_id', read_only=True)
    transactionDetails = TransactionDetailSerializer(source='transaction_details', many=True, read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id',
            'amount',
            'createdById',
            'createdBy',
            'payerId',
            'payer',
            'description',
            'createdAt',
            'updatedAt',
            'groupId',
            'transactionDetails',
        ]
        read_only_fields = fields


class TransactionGroupSerializer(serializers.Serializer):
    """The owning group embedded in a single transaction, without its collections."""

    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    createdById = serializers.CharField(source='created_by_id', read_only=True)
    createdBy = UserSummarySerializer(source='created_by', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    groupMembers = serializers.SerializerMethodField()
    transactions = serializers.SerializerMethodField()

    def get_groupMembers(self, obj):
        return None

    def get_transactions(self, obj):
        return None


class TransactionWithGroupSerializer(TransactionSerializer):
    """Single transaction view, led by its group."""

    group = TransactionGroupSerializer(read_only=True)

    class Meta(TransactionSerializer.Meta):
        fields = ['group', *TransactionSerializer.Meta.fields]
        read_only_fields = fields


# =============================================================================
# Input serializers
# =============================================================================

class TransactionDetailInputSerializer(serializers.Serializer):
    recipientId = serializers.CharField(source='recipient_id')
    amount = serializers.DecimalField(**AMOUNT_FIELD_KWARGS)


class TransactionCreateSerializer(serializers.Serializer):
    """Serializer for recording a transaction."""

    groupId = serializers.IntegerField(source='group_id')
    payerId = serializers.CharField(source='payer_id')
    amount = serializers.DecimalField(**AMOUNT_FIELD_KWARGS, error_messages={'required': 'Amount is required'})
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    transactionDetails = TransactionDetailInputSerializer(
        source='details',
        many=True,
        allow_empty=False,
        error_messages={'empty': 'Transaction must have at least one recipient'},
    )

    def validate_amount(self, value):
        if value == 0:
            raise serializers.ValidationError('Amount is required')
        return value

    def validate(self, attrs):
        recipient_ids = [detail['recipient_id'] for detail in attrs['details']]
        if len(recipient_ids) != len(set(recipient_ids)):
            raise serializers.ValidationError('Each recipient can only appear once in a transaction')
        return attrs


class TransactionUpdateSerializer(serializers.Serializer):
    """Serializer for transaction updates. Every field is optional."""

    payerId = serializers.CharField(source='payer_id', required=False)
    amount = serializers.DecimalField(required=False, **AMOUNT_FIELD_KWARGS)
    description = serializers.CharField(required=False, allow_blank=True, max_length=255)
    transactionDetails = TransactionDetailInputSerializer(
        source='details',
        many=True,
        required=False,
        allow_empty=False,
        error_messages={'empty': 'Transaction must have at least one recipient'},
    )

    def validate(self, attrs):
        details = attrs.get('details')
        if details is not None:
            recipient_ids = [detail['recipient_id'] for detail in details]
            if len(recipient_ids) != len(set(recipient_ids)):
                raise serializers.ValidationError('Each recipient can only appear once in a transaction')
        return attrs
