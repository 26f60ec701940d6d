# tests/test_schemas.py

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from Trackr_app.schemas import QUANTITY_MAX, InsertTrade, UpdateTrade, dump_supplied


def test_insert_accepts_camel_case():
    trade = InsertTrade.model_validate({
        'symbol': ' MSFT ',
        'type': 'short',
        'quantity': '3',
        'entryPrice': '410.25',
        'exitPrice': 400,
        'notes': 'earnings fade',
    })
    assert dump_supplied(trade) == {
        'symbol': 'MSFT',
        'direction': 'short',
        'quantity': 3,
        'entry_price': Decimal('410.25'),
        'exit_price': Decimal('400'),
        'notes': 'earnings fade',
    }


def test_insert_accepts_snake_case():
    trade = InsertTrade.model_validate({
        'symbol': 'MSFT', 'direction': 'long', 'quantity': 1, 'entry_price': '1.50',
    })
    assert trade.entry_price == Decimal('1.50')
    assert trade.exit_price is None


def test_insert_reports_every_missing_field():
    with pytest.raises(ValidationError) as exc_info:
        InsertTrade.model_validate({})
    errors = exc_info.value.errors()
    assert len(errors) == 4
    assert {'symbol', 'quantity', 'entryPrice'} <= {error['loc'][0] for error in errors}


def test_aware_entry_time_is_made_naive():
    trade = InsertTrade.model_validate({
        'symbol': 'MSFT', 'type': 'long', 'quantity': 1, 'entryPrice': '1.00',
        'entryTime': datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc).isoformat(),
    })
    assert trade.entry_time.tzinfo is None


def test_update_only_dumps_supplied_fields():
    update = UpdateTrade.model_validate({'exitPrice': '12.00'})
    assert dump_supplied(update) == {'exit_price': Decimal('12.00')}


def test_update_allows_empty_body():
    assert dump_supplied(UpdateTrade.model_validate({})) == {}


@pytest.mark.parametrize('field', ['exitPrice', 'entryPrice', 'quantity', 'symbol', 'type'])
def test_update_rejects_null(field):
    with pytest.raises(ValidationError):
        UpdateTrade.model_validate({field: None})


def test_update_allows_clearing_notes():
    assert dump_supplied(UpdateTrade.model_validate({'notes': None})) == {'notes': None}


def test_quantity_upper_bound():
    base = {'symbol': 'MSFT', 'type': 'long', 'entryPrice': '1.00'}
    assert InsertTrade.model_validate(dict(base, quantity=QUANTITY_MAX)).quantity == QUANTITY_MAX
    with pytest.raises(ValidationError):
        InsertTrade.model_validate(dict(base, quantity=QUANTITY_MAX + 1))
    with pytest.raises(ValidationError):
        UpdateTrade.model_validate({'quantity': QUANTITY_MAX + 1})
