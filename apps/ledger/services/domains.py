"""Lookup of the model and balance sink behind each transaction domain."""
from apps.partners.models import Partner
from apps.ledger.models import BusinessTransaction, PersonalTransaction

from .balance_sinks import AggregateBalanceSink, PairwiseBalanceSink
from .exceptions import NotFoundError

BUSINESS = 'business'
PERSONAL = 'personal'

DOMAINS = (BUSINESS, PERSONAL)

_MODELS = {
    BUSINESS: BusinessTransaction,
    PERSONAL: PersonalTransaction,
}

_SINKS = {
    BUSINESS: AggregateBalanceSink(),
    PERSONAL: PairwiseBalanceSink(),
}


def transaction_model(domain):
    try:
        return _MODELS[domain]
    except KeyError:
        raise ValueError(f"Unknown transaction domain: {domain!r}") from None


def balance_sink(domain):
    try:
        return _SINKS[domain]
    except KeyError:
        raise ValueError(f"Unknown transaction domain: {domain!r}") from None


def lock_transaction(domain, transaction_id):
    """Fetch a transaction row with SELECT ... FOR UPDATE."""
    model = transaction_model(domain)
    try:
        return model.objects.select_for_update().get(pk=transaction_id)
    except model.DoesNotExist:
        raise NotFoundError(f"{domain.title()} transaction {transaction_id} not found")


def get_active_partner(partner_id) -> Partner:
    try:
        return Partner.objects.get(pk=partner_id, is_active=True)
    except Partner.DoesNotExist:
        raise NotFoundError(f"Partner {partner_id} not found")
