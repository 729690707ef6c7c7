# ==========================================
# apps/transactions/models.py
# ==========================================

from decimal import Decimal

from django.db import models


class Transaction(models.Model):
    """
    An expense paid by one member on behalf of one or more recipients.

    A negative amount marks a repayment: the sole recipient paid the payer
    back. Payer and creator are cleared when that user stops being a member,
    the amounts are kept.
    """

    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='transactions')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.CharField(max_length=255, blank=True, default='')
    payer = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='paid_transactions',
    )
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_transactions',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'transactions'
        indexes = [
            models.Index(fields=['group', 'created_at'], name='transactions_group_idx'),
            models.Index(fields=['payer'], name='transactions_payer_idx'),
        ]
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.amount} in {self.group_id} paid by {self.payer_id}"

    @property
    def is_repayment(self):
        return self.amount < Decimal('0')


class TransactionDetail(models.Model):
    """One recipient's share of a transaction."""

    transaction = models.ForeignKey(Transaction, on_delete=models.CASCADE, related_name='transaction_details')
    recipient = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transaction_details',
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'transaction_details'
        ordering = ['id']

    def __str__(self):
        return f"{self.amount} to {self.recipient_id}"
