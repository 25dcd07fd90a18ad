from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'ledger'

# Router for ViewSets
router = DefaultRouter()
router.register(r'sales', views.SaleEntryViewSet, basename='sale')
router.register(r'business-transactions', views.BusinessTransactionViewSet, basename='business-transaction')
router.register(r'personal-transactions', views.PersonalTransactionViewSet, basename='personal-transaction')
router.register(r'recurring-rules', views.RecurringRuleViewSet, basename='recurring-rule')

urlpatterns = [
    # Transaction routes (both domains)
    # GET    /api/ledger/<domain>-transactions/               - List caller's transactions
    # POST   /api/ledger/<domain>-transactions/               - Create (pending)
    # GET    /api/ledger/<domain>-transactions/{id}/          - Details
    # PATCH  /api/ledger/<domain>-transactions/{id}/          - Edit
    # DELETE /api/ledger/<domain>-transactions/{id}/          - Delete
    # POST   /api/ledger/<domain>-transactions/{id}/approve/  - Approve (receiver)
    # POST   /api/ledger/<domain>-transactions/{id}/reject/   - Reject (receiver)
    # GET    /api/ledger/<domain>-transactions/pending/       - Awaiting caller

    # Balances
    path('balances/<uuid:partner_id>/', views.partner_balance, name='partner-balance'),
    path('pairwise-balances/', views.my_pairwise_balances, name='my-pairwise-balances'),
    path(
        'pairwise-balances/<uuid:partner_a_id>/<uuid:partner_b_id>/',
        views.pair_balance,
        name='pair-balance',
    ),
    path('reconcile/', views.reconcile, name='reconcile'),

    # Include router URLs
    path('', include(router.urls)),
]
