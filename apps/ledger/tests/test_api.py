import uuid
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status
from apps.partners.models import Partner
from apps.ledger.models import SaleEntry, TransactionStatus
from apps.ledger.services import BUSINESS, PERSONAL, approve_transaction
from apps.ledger.services.balance_sinks import AggregateBalanceSink


def _balance(partner):
    partner.refresh_from_db()
    return partner.balance


# =============================================================================
# Sales
# =============================================================================

@pytest.mark.django_db
class TestSalesAPI:
    """Tests for /api/ledger/sales/"""

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('ledger:sale-list'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create(self, client_a, partner_a):
        response = client_a.post(reverse('ledger:sale-list'), {
            'date': '2025-06-01',
            'partner_id': str(partner_a.id),
            'online_amount': '500.00',
            'cash_amount': '500.00',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['amount'] == '1000.00'
        assert response.data['created_by']['id'] == str(partner_a.id)
        assert _balance(partner_a) == Decimal('1000.00')

    def test_duplicate_date(self, client_a, partner_a):
        data = {'date': '2025-06-01', 'online_amount': '1.00', 'cash_amount': '0.00'}
        client_a.post(reverse('ledger:sale-list'), data, format='json')
        response = client_a.post(reverse('ledger:sale-list'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'already exists' in response.data['error']
        assert SaleEntry.objects.count() == 1

    def test_negative_amount_is_validation_error(self, client_a):
        response = client_a.post(reverse('ledger:sale-list'), {
            'date': '2025-06-01', 'online_amount': '-1.00', 'cash_amount': '0.00',
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_and_filter(self, client_a, partner_a):
        for day in ('2025-06-01', '2025-06-02', '2025-06-03'):
            client_a.post(reverse('ledger:sale-list'), {
                'date': day, 'online_amount': '1.00', 'cash_amount': '1.00',
            }, format='json')

        response = client_a.get(reverse('ledger:sale-list'), {'start_date': '2025-06-02'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        assert response.data['results'][0]['date'] == '2025-06-03'

    def test_patch_and_delete(self, client_a, partner_a):
        created = client_a.post(reverse('ledger:sale-list'), {
            'date': '2025-06-01',
            'partner_id': str(partner_a.id),
            'online_amount': '100.00',
            'cash_amount': '0.00',
        }, format='json')
        url = reverse('ledger:sale-detail', args=[created.data['id']])

        response = client_a.patch(url, {'cash_amount': '50.00'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['amount'] == '150.00'
        assert _balance(partner_a) == Decimal('150.00')

        response = client_a.delete(url)
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert _balance(partner_a) == Decimal('0.00')

    def test_other_partner_cannot_edit_or_delete(self, client_a, client_c, partner_a, partner_c):
        created = client_a.post(reverse('ledger:sale-list'), {
            'date': '2025-06-01',
            'partner_id': str(partner_a.id),
            'online_amount': '100.00',
            'cash_amount': '0.00',
        }, format='json')
        url = reverse('ledger:sale-detail', args=[created.data['id']])

        response = client_c.patch(url, {'partner_id': str(partner_c.id)}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert client_c.delete(url).status_code == status.HTTP_403_FORBIDDEN

        assert _balance(partner_a) == Decimal('100.00')
        assert _balance(partner_c) == Decimal('0.00')
        assert SaleEntry.objects.count() == 1

    def test_missing_sale(self, client_a):
        response = client_a.get(reverse('ledger:sale-detail', args=[uuid.uuid4()]))
        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Business transactions
# =============================================================================

@pytest.mark.django_db
class TestBusinessTransactionAPI:
    """Tests for /api/ledger/business-transactions/"""

    def test_create_is_pending(self, client_a, partner_a, partner_b):
        response = client_a.post(reverse('ledger:business-transaction-list'), {
            'to_partner_id': str(partner_b.id),
            'amount': '300.00',
            'description': 'Stock',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == TransactionStatus.PENDING
        assert response.data['from_partner']['id'] == str(partner_a.id)
        assert _balance(partner_b) == Decimal('0.00')

    def test_send_to_self(self, client_a, partner_a):
        response = client_a.post(reverse('ledger:business-transaction-list'), {
            'to_partner_id': str(partner_a.id),
            'amount': '1.00',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_receiver_approves(self, client_b, pending_business, partner_a, partner_b):
        url = reverse('ledger:business-transaction-approve', args=[pending_business.id])
        response = client_b.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == TransactionStatus.APPROVED
        assert _balance(partner_a) == Decimal('-300.00')
        assert _balance(partner_b) == Decimal('300.00')

    def test_sender_approval_forbidden(self, client_a, pending_business):
        url = reverse('ledger:business-transaction-approve', args=[pending_business.id])
        response = client_a.post(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_double_approval_is_bad_request(self, client_b, approved_business, partner_b):
        url = reverse('ledger:business-transaction-approve', args=[approved_business.id])
        response = client_b.post(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert _balance(partner_b) == Decimal('300.00')

    def test_reject_with_reason(self, client_b, pending_business):
        url = reverse('ledger:business-transaction-reject', args=[pending_business.id])
        response = client_b.post(url, {'reason': 'Not mine'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == TransactionStatus.REJECTED
        assert response.data['rejection_reason'] == 'Not mine'

    def test_pending_inbox(self, client_a, client_b, pending_business):
        url = reverse('ledger:business-transaction-pending')

        assert [t['id'] for t in client_b.get(url).data] == [str(pending_business.id)]
        assert client_a.get(url).data == []

    def test_list_only_own(self, client_c, pending_business):
        response = client_c.get(reverse('ledger:business-transaction-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 0

    def test_outsider_cannot_view(self, client_c, pending_business):
        url = reverse('ledger:business-transaction-detail', args=[pending_business.id])
        assert client_c.get(url).status_code == status.HTTP_404_NOT_FOUND

    def test_edit_approved_resets(self, client_b, approved_business, partner_a):
        url = reverse('ledger:business-transaction-detail', args=[approved_business.id])
        response = client_b.patch(url, {'amount': '250.00'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == TransactionStatus.PENDING
        assert _balance(partner_a) == Decimal('0.00')

    def test_outsider_cannot_delete(self, client_c, approved_business):
        url = reverse('ledger:business-transaction-detail', args=[approved_business.id])
        assert client_c.delete(url).status_code == status.HTTP_403_FORBIDDEN

    def test_delete_approved(self, client_a, approved_business, partner_b):
        url = reverse('ledger:business-transaction-detail', args=[approved_business.id])

        assert client_a.delete(url).status_code == status.HTTP_204_NO_CONTENT
        assert _balance(partner_b) == Decimal('0.00')

    def test_storage_failure_is_503(self, client_b, pending_business):
        url = reverse('ledger:business-transaction-approve', args=[pending_business.id])
        with patch.object(AggregateBalanceSink, 'apply', side_effect=DatabaseError('gone')):
            response = client_b.post(url)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        pending_business.refresh_from_db()
        assert pending_business.status == TransactionStatus.PENDING

    def test_unknown_transaction(self, client_b):
        url = reverse('ledger:business-transaction-approve', args=[uuid.uuid4()])
        assert client_b.post(url).status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Personal transactions and balances
# =============================================================================

@pytest.mark.django_db
class TestPersonalAndBalancesAPI:

    def test_personal_flow(self, client_a, client_b, partner_a, partner_b):
        created = client_a.post(reverse('ledger:personal-transaction-list'), {
            'to_partner_id': str(partner_b.id),
            'amount': '50.00',
            'transaction_type': 'lend',
            'category': 'food',
        }, format='json')
        assert created.status_code == status.HTTP_201_CREATED
        assert created.data['transaction_type'] == 'lend'

        url = reverse('ledger:personal-transaction-approve', args=[created.data['id']])
        assert client_b.post(url).status_code == status.HTTP_200_OK

        pair_url = reverse('ledger:pair-balance', args=[partner_b.id, partner_a.id])
        response = client_a.get(pair_url)
        assert response.data['partner_a_id'] == str(partner_a.id)
        assert response.data['balance_amount'] == '-50.00'

        mine = client_b.get(reverse('ledger:my-pairwise-balances')).data
        assert mine[0]['counterparty']['id'] == str(partner_a.id)
        assert mine[0]['balance'] == '50.00'

    def test_partner_balance(self, client_a, approved_business, partner_b):
        response = client_a.get(reverse('ledger:partner-balance', args=[partner_b.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['balance'] == '300.00'

    def test_unknown_partner_balance(self, client_a):
        response = client_a.get(reverse('ledger:partner-balance', args=[uuid.uuid4()]))
        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Reconciliation and recurring rules
# =============================================================================

@pytest.mark.django_db
class TestAdminEndpoints:

    def test_reconcile_requires_staff(self, client_a):
        response = client_a.post(reverse('ledger:reconcile'))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_reconcile(self, staff_client, approved_business, partner_a):
        Partner.objects.filter(pk=partner_a.pk).update(balance=Decimal('5.00'))

        dry = staff_client.post(reverse('ledger:reconcile') + '?dry_run=true')
        assert dry.status_code == status.HTTP_200_OK
        assert len(dry.data['partners']) == 1
        assert _balance(partner_a) == Decimal('5.00')

        response = staff_client.post(reverse('ledger:reconcile'))
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['partner_corrections']) == 1
        assert _balance(partner_a) == Decimal('-300.00')

    def test_recurring_rule_lifecycle(self, client_a, client_b, staff_client, partner_b):
        created = client_a.post(reverse('ledger:recurring-rule-list'), {
            'to_partner_id': str(partner_b.id),
            'amount': '10.00',
            'frequency': 'daily',
            'start_date': '2099-01-01',
        }, format='json')
        assert created.status_code == status.HTTP_201_CREATED
        rule_id = created.data['id']
        assert created.data['next_execution_date'] == '2099-01-01'

        assert client_b.get(reverse('ledger:recurring-rule-list')).data[0]['id'] == rule_id

        active_url = reverse('ledger:recurring-rule-active', args=[rule_id])
        assert client_b.post(active_url, {'is_active': False}, format='json').status_code == status.HTTP_403_FORBIDDEN
        paused = client_a.post(active_url, {'is_active': False}, format='json')
        assert paused.data['is_active'] is False

        run_url = reverse('ledger:recurring-rule-run')
        assert client_a.post(run_url, {}, format='json').status_code == status.HTTP_403_FORBIDDEN
        ran = staff_client.post(run_url, {'date': '2099-01-05'}, format='json')
        assert ran.status_code == status.HTTP_200_OK
        assert ran.data == []

        detail = reverse('ledger:recurring-rule-detail', args=[rule_id])
        assert client_b.delete(detail).status_code == status.HTTP_403_FORBIDDEN
        assert client_a.delete(detail).status_code == status.HTTP_204_NO_CONTENT
        assert client_a.delete(detail).status_code == status.HTTP_404_NOT_FOUND
