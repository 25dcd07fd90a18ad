from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from django.db.models import Q
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .models import SaleEntry, RecurringTransactionRule
from .serializers import (
    SaleEntrySerializer,
    SaleEntryWriteSerializer,
    TransactionSerializer,
    PersonalTransactionSerializer,
    TransactionCreateSerializer,
    PersonalTransactionCreateSerializer,
    TransactionUpdateSerializer,
    RejectSerializer,
    BalanceSerializer,
    PairwiseBalanceSerializer,
    PairBalanceSerializer,
    RecurringRuleSerializer,
    RecurringRuleCreateSerializer,
    RuleActiveSerializer,
    RunRulesSerializer,
)
from apps.ledger.services import (
    BUSINESS,
    PERSONAL,
    create_sale,
    update_sale,
    delete_sale,
    get_sale,
    create_transaction,
    update_transaction,
    delete_transaction,
    get_transaction,
    approve_transaction,
    reject_transaction,
    list_pending_approvals,
    get_partner_transactions,
    get_balance,
    get_pairwise_balance,
    get_partner_pairwise_balances,
    reconcile_all_balances,
    find_balance_drift,
    create_recurring_rule,
    set_rule_active,
    delete_recurring_rule,
    run_due_rules,
    # Exceptions
    LedgerServiceError,
    NotFoundError,
    NotReceiverError,
    NotPartyError,
    StorageError,
)


def ledger_error_response(exc: LedgerServiceError) -> Response:
    """Translate a domain error into a JSON error response."""
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (NotReceiverError, NotPartyError)):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, StorageError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(exc)}, status=code)


class LedgerPagination(PageNumberPagination):
    """Custom pagination for ledger lists."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


# =============================================================================
# Sales
# =============================================================================

@extend_schema(tags=['sales'])
class SaleEntryViewSet(viewsets.ModelViewSet):
    """
    Daily sale entries.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Sale entries, newest first (filter with ?start_date, ?end_date, ?partner)
    create: Record a day's sales
    retrieve: Get one sale entry
    update / partial_update: Edit a sale entry
    destroy: Delete a sale entry
    """

    serializer_class = SaleEntrySerializer
    permission_classes = [IsAuthenticated]
    pagination_class = LedgerPagination

    def get_queryset(self):
        qs = SaleEntry.objects.select_related('partner', 'created_by')
        params = self.request.query_params
        if params.get('start_date'):
            qs = qs.filter(date__gte=params['start_date'])
        if params.get('end_date'):
            qs = qs.filter(date__lte=params['end_date'])
        if params.get('partner'):
            qs = qs.filter(partner_id=params['partner'])
        return qs

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return SaleEntryWriteSerializer
        return SaleEntrySerializer

    @extend_schema(request=SaleEntryWriteSerializer, responses={201: SaleEntrySerializer})
    def create(self, request, *args, **kwargs):
        serializer = SaleEntryWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            sale = create_sale(created_by=request.user, **serializer.validated_data)
        except LedgerServiceError as e:
            return ledger_error_response(e)

        return Response(SaleEntrySerializer(sale).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, *args, **kwargs):
        try:
            sale = get_sale(sale_id=kwargs['pk'])
        except LedgerServiceError as e:
            return ledger_error_response(e)
        return Response(SaleEntrySerializer(sale).data)

    @extend_schema(request=SaleEntryWriteSerializer, responses={200: SaleEntrySerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = SaleEntryWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            sale = update_sale(
                sale_id=kwargs['pk'],
                actor_id=request.user.id,
                **serializer.validated_data,
            )
        except LedgerServiceError as e:
            return ledger_error_response(e)

        return Response(SaleEntrySerializer(sale).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_sale(sale_id=kwargs['pk'], actor_id=request.user.id)
        except LedgerServiceError as e:
            return ledger_error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Transactions
# =============================================================================

class TransactionViewSet(viewsets.ViewSet):
    """
    Transfers between partners in one domain.

    list: Transactions the caller sent or received (?status= to filter)
    create: Send a transfer to another partner (starts pending)
    retrieve: Get one transaction
    partial_update: Edit a transaction (an approved one goes back to pending)
    destroy: Delete a transaction (reverses it if approved)
    approve / reject: Receiver's decision on a pending transaction
    pending: Transactions waiting for the caller's decision
    """

    domain = None
    output_serializer_class = TransactionSerializer
    create_serializer_class = TransactionCreateSerializer
    permission_classes = [IsAuthenticated]

    def _output(self, txn):
        return self.output_serializer_class(txn).data

    def list(self, request):
        qs = get_partner_transactions(
            partner=request.user,
            domain=self.domain,
            status=request.query_params.get('status'),
        )
        paginator = LedgerPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(self.output_serializer_class(page, many=True).data)

    def create(self, request):
        serializer = self.create_serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        try:
            txn = create_transaction(
                from_partner_id=request.user.id,
                domain=self.domain,
                **data,
            )
        except LedgerServiceError as e:
            return ledger_error_response(e)

        return Response(self._output(txn), status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        try:
            txn = get_transaction(transaction_id=pk, domain=self.domain)
        except LedgerServiceError as e:
            return ledger_error_response(e)
        if not txn.involves(request.user.id):
            return Response({'error': 'Transaction not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(self._output(txn))

    def partial_update(self, request, pk=None):
        serializer = TransactionUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            txn = update_transaction(
                transaction_id=pk,
                domain=self.domain,
                actor_id=request.user.id,
                **serializer.validated_data,
            )
        except LedgerServiceError as e:
            return ledger_error_response(e)

        return Response(self._output(txn))

    def destroy(self, request, pk=None):
        try:
            delete_transaction(transaction_id=pk, domain=self.domain, actor_id=request.user.id)
        except LedgerServiceError as e:
            return ledger_error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        """Approve a pending transaction (receiver only)."""
        try:
            txn = approve_transaction(transaction_id=pk, domain=self.domain, actor_id=request.user.id)
        except LedgerServiceError as e:
            return ledger_error_response(e)
        return Response(self._output(txn))

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        """Reject a pending transaction (receiver only)."""
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            txn = reject_transaction(
                transaction_id=pk,
                domain=self.domain,
                actor_id=request.user.id,
                reason=serializer.validated_data['reason'],
            )
        except LedgerServiceError as e:
            return ledger_error_response(e)
        return Response(self._output(txn))

    @action(detail=False, methods=['get'])
    def pending(self, request):
        """Transactions awaiting the caller's approval."""
        qs = list_pending_approvals(partner=request.user, domain=self.domain)
        return Response(self.output_serializer_class(qs, many=True).data)


@extend_schema(tags=['business-transactions'])
class BusinessTransactionViewSet(TransactionViewSet):
    domain = BUSINESS
    serializer_class = TransactionSerializer


@extend_schema(tags=['personal-transactions'])
class PersonalTransactionViewSet(TransactionViewSet):
    domain = PERSONAL
    serializer_class = PersonalTransactionSerializer
    output_serializer_class = PersonalTransactionSerializer
    create_serializer_class = PersonalTransactionCreateSerializer


# =============================================================================
# Balances
# =============================================================================

@extend_schema(
    responses={200: BalanceSerializer},
    description="Stored aggregate balance of a partner.",
    tags=['balances'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def partner_balance(request, partner_id):
    """Get one partner's balance."""
    try:
        balance = get_balance(partner_id=partner_id)
    except LedgerServiceError as e:
        return ledger_error_response(e)
    return Response(BalanceSerializer({'partner_id': partner_id, 'balance': balance}).data)


@extend_schema(
    responses={200: PairwiseBalanceSerializer(many=True)},
    description=(
        "Caller's personal balance with each counterparty. "
        "Positive: the caller has received more than they sent."
    ),
    tags=['balances'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_pairwise_balances(request):
    balances = get_partner_pairwise_balances(partner=request.user)
    return Response(PairwiseBalanceSerializer(balances, many=True).data)


@extend_schema(
    responses={200: PairBalanceSerializer},
    description=(
        "Stored balance of a partner pair, ordered by id. A transfer from "
        "the lower id to the higher id lowers it; the reverse raises it."
    ),
    tags=['balances'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pair_balance(request, partner_a_id, partner_b_id):
    try:
        amount = get_pairwise_balance(partner_a_id=partner_a_id, partner_b_id=partner_b_id)
    except LedgerServiceError as e:
        return ledger_error_response(e)

    lo, hi = sorted((partner_a_id, partner_b_id))
    return Response(PairBalanceSerializer({
        'partner_a_id': lo,
        'partner_b_id': hi,
        'balance_amount': amount,
    }).data)


@extend_schema(
    parameters=[OpenApiParameter('dry_run', bool, description='Report drift without writing')],
    description="Rebuild every balance from history (staff only).",
    tags=['balances'],
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def reconcile(request):
    """Reconcile all balances, or report drift with ?dry_run=true."""
    if request.query_params.get('dry_run', '').lower() in ('1', 'true', 'yes'):
        return Response({'dry_run': True, **find_balance_drift()})

    try:
        report = reconcile_all_balances()
    except LedgerServiceError as e:
        return ledger_error_response(e)
    return Response({'dry_run': False, **report})


# =============================================================================
# Recurring rules
# =============================================================================

@extend_schema(tags=['recurring-rules'])
class RecurringRuleViewSet(mixins.ListModelMixin,
                           mixins.RetrieveModelMixin,
                           mixins.DestroyModelMixin,
                           viewsets.GenericViewSet):
    """
    Recurring personal transfers.

    list: Rules where the caller is sender or receiver
    create: Schedule a recurring transfer from the caller
    active: Pause or resume a rule
    run: Generate due transactions now (staff only)
    """

    serializer_class = RecurringRuleSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        return RecurringTransactionRule.objects.filter(
            Q(from_partner=user) | Q(to_partner=user)
        ).select_related('from_partner', 'to_partner')

    @extend_schema(request=RecurringRuleCreateSerializer, responses={201: RecurringRuleSerializer})
    def create(self, request, *args, **kwargs):
        serializer = RecurringRuleCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            rule = create_recurring_rule(
                from_partner_id=request.user.id,
                created_by=request.user,
                **serializer.validated_data,
            )
        except LedgerServiceError as e:
            return ledger_error_response(e)

        return Response(RecurringRuleSerializer(rule).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_recurring_rule(rule_id=kwargs['pk'], actor_id=request.user.id)
        except LedgerServiceError as e:
            return ledger_error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=RuleActiveSerializer, responses={200: RecurringRuleSerializer})
    @action(detail=True, methods=['post'])
    def active(self, request, pk=None):
        """Pause or resume a rule."""
        serializer = RuleActiveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            rule = set_rule_active(
                rule_id=pk,
                actor_id=request.user.id,
                is_active=serializer.validated_data['is_active'],
            )
        except LedgerServiceError as e:
            return ledger_error_response(e)
        return Response(RecurringRuleSerializer(rule).data)

    @extend_schema(request=RunRulesSerializer, responses={200: PersonalTransactionSerializer(many=True)})
    @action(detail=False, methods=['post'], permission_classes=[IsAdminUser])
    def run(self, request):
        """Generate pending transactions for all due rules."""
        serializer = RunRulesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            created = run_due_rules(today=serializer.validated_data.get('date'))
        except LedgerServiceError as e:
            return ledger_error_response(e)
        return Response(PersonalTransactionSerializer(created, many=True).data)
