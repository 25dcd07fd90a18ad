from rest_framework import viewsets, status, mixins
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from django.db.models import Count
from drf_spectacular.utils import extend_schema

from .models import Expense, ExpenseCategory
from .serializers import ExpenseSerializer, ExpenseWriteSerializer, ExpenseCategorySerializer
from apps.expenses.services import (
    create_expense,
    update_expense,
    delete_expense,
    create_category,
    delete_category,
    # Exceptions
    ExpensesServiceError,
    ExpenseNotFoundError,
    CategoryNotFoundError,
    NotExpenseOwnerError,
)


def _error_response(exc):
    if isinstance(exc, (ExpenseNotFoundError, CategoryNotFoundError)):
        return Response({'error': str(exc)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, NotExpenseOwnerError):
        return Response({'error': str(exc)}, status=status.HTTP_403_FORBIDDEN)
    return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)


class ExpensePagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(tags=['expenses'])
class ExpenseViewSet(viewsets.ModelViewSet):
    """
    Business expenses.

    list: Expenses, newest first (?start_date, ?end_date, ?category)
    create / update / partial_update / destroy
    """

    serializer_class = ExpenseSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ExpensePagination

    def get_queryset(self):
        qs = Expense.objects.select_related('category', 'created_by')
        params = self.request.query_params
        if params.get('start_date'):
            qs = qs.filter(expense_date__gte=params['start_date'])
        if params.get('end_date'):
            qs = qs.filter(expense_date__lte=params['end_date'])
        if params.get('category'):
            qs = qs.filter(category_id=params['category'])
        return qs

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return ExpenseWriteSerializer
        return ExpenseSerializer

    @extend_schema(request=ExpenseWriteSerializer, responses={201: ExpenseSerializer})
    def create(self, request, *args, **kwargs):
        serializer = ExpenseWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            expense = create_expense(created_by=request.user, **serializer.validated_data)
        except ExpensesServiceError as e:
            return _error_response(e)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ExpenseWriteSerializer, responses={200: ExpenseSerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = ExpenseWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            expense = update_expense(
                expense_id=kwargs['pk'],
                actor_id=request.user.id,
                **serializer.validated_data,
            )
        except ExpensesServiceError as e:
            return _error_response(e)

        return Response(ExpenseSerializer(expense).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_expense(expense_id=kwargs['pk'], actor_id=request.user.id)
        except ExpensesServiceError as e:
            return _error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(tags=['expenses'])
class ExpenseCategoryViewSet(mixins.ListModelMixin,
                             mixins.RetrieveModelMixin,
                             mixins.CreateModelMixin,
                             mixins.DestroyModelMixin,
                             viewsets.GenericViewSet):
    """Expense categories with usage counts."""

    serializer_class = ExpenseCategorySerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return ExpenseCategory.objects.annotate(expense_count=Count('expenses'))

    def create(self, request, *args, **kwargs):
        serializer = ExpenseCategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            category = create_category(
                name=serializer.validated_data['name'],
                description=serializer.validated_data.get('description', ''),
            )
        except ExpensesServiceError as e:
            return _error_response(e)

        return Response(ExpenseCategorySerializer(category).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_category(category_id=kwargs['pk'])
        except ExpensesServiceError as e:
            return _error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)
