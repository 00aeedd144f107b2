# accounting/filters.py
"""
Typed movement filter.

A MovementFilter is built once at the boundary by
serializers.MovementFilterSerializer and then applied to a queryset.
It never sees raw query strings.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from accounting.search import folded_search


@dataclass(frozen=True)
class MovementFilter:
    account_id: Optional[int] = None
    movement_type: Optional[str] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    search: str = ""
    status: Optional[str] = None
    payment_method: Optional[str] = None
    limit: Optional[int] = None
    offset: int = 0

    def apply(self, queryset):
        """Narrow the queryset by every predicate (no paging)."""
        if self.account_id is not None:
            queryset = queryset.filter(account_id=self.account_id)
        if self.movement_type:
            queryset = queryset.filter(movement_type=self.movement_type)
        if self.min_amount is not None:
            queryset = queryset.filter(amount__gte=self.min_amount)
        if self.max_amount is not None:
            queryset = queryset.filter(amount__lte=self.max_amount)
        if self.start_date:
            queryset = queryset.filter(transaction_date__gte=self.start_date)
        if self.end_date:
            queryset = queryset.filter(transaction_date__lte=self.end_date)
        if self.status:
            queryset = queryset.filter(status=self.status)
        if self.payment_method:
            queryset = queryset.filter(payment_method=self.payment_method)
        if self.search:
            queryset = folded_search(queryset, ("description", "reference_number"), self.search)
        return queryset

    def paginate(self, queryset):
        if self.limit is None:
            return queryset[self.offset:]
        return queryset[self.offset:self.offset + self.limit]
