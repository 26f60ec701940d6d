# tests/test_api_routes.py
"""
REST endpoints: status codes, payload shapes and owner isolation
"""

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from Trackr_app.errors import StoreError
from Trackr_app.extensions import db
from Trackr_app.models import Trade

NEW_TRADE = {
    'symbol': 'AAPL',
    'type': 'long',
    'quantity': 5,
    'entryPrice': '100.00',
}


def create(client, **overrides):
    return client.post('/api/trades', json=dict(NEW_TRADE, **overrides))


class TestAuthRequired:

    @pytest.mark.parametrize('method,path', [
        ('get', '/api/auth/user'),
        ('get', '/api/trading/stats'),
        ('get', '/api/trades'),
        ('post', '/api/trades'),
        ('patch', '/api/trades/abc'),
        ('delete', '/api/trades/abc'),
    ])
    def test_unauthenticated(self, client, method, path):
        response = getattr(client, method)(path)
        assert response.status_code == 401
        assert response.get_json() == {'message': 'Unauthorized'}


class TestCurrentUser:

    def test_returns_profile(self, auth_client):
        response = auth_client.get('/api/auth/user')

        assert response.status_code == 200
        data = response.get_json()
        assert data['id'] == 'user-a'
        assert data['email'] == 'user-a@example.com'
        assert set(data) == {'id', 'email', 'firstName', 'lastName', 'profileImageUrl',
                             'createdAt', 'updatedAt'}


class TestCreateTrade:

    def test_open_trade(self, auth_client):
        response = create(auth_client)

        assert response.status_code == 201
        data = response.get_json()
        assert data['status'] == 'open'
        assert data['pnl'] is None
        assert data['exitTime'] is None
        assert data['entryPrice'] == '100.00'
        assert data['userId'] == 'user-a'

    def test_closed_trade(self, auth_client):
        response = create(auth_client, type='short', exitPrice='90.00')

        data = response.get_json()
        assert response.status_code == 201
        assert data['status'] == 'closed'
        assert data['pnl'] == '50.00'
        assert data['exitTime'] is not None

    def test_direction_key_accepted(self, auth_client):
        payload = {k: v for k, v in NEW_TRADE.items() if k != 'type'}
        response = auth_client.post('/api/trades', json=dict(payload, direction='short'))
        assert response.get_json()['type'] == 'short'

    @pytest.mark.parametrize('missing', ['symbol', 'type', 'quantity', 'entryPrice'])
    def test_missing_required_field(self, auth_client, missing):
        payload = {k: v for k, v in NEW_TRADE.items() if k != missing}

        response = auth_client.post('/api/trades', json=payload)

        assert response.status_code == 400
        data = response.get_json()
        assert data['message'] == 'Invalid trade data'
        assert data['errors']

    @pytest.mark.parametrize('field,value', [
        ('type', 'sideways'),
        ('quantity', 0),
        ('quantity', 'many'),
        ('entryPrice', '-1'),
        ('entryPrice', '100.123'),
        ('symbol', '   '),
    ])
    def test_malformed_field(self, auth_client, field, value):
        response = create(auth_client, **{field: value})
        assert response.status_code == 400

    def test_non_json_body(self, auth_client):
        response = auth_client.post('/api/trades', data='symbol=AAPL')
        assert response.status_code == 400

    def test_store_failure(self, auth_client):
        with patch('Trackr_app.api_routes.TradeStorage.create_trade', side_effect=StoreError('create_trade')):
            response = create(auth_client)

        assert response.status_code == 500
        assert response.get_json() == {'message': 'Failed to create trade'}


class TestListTrades:

    def test_default_limit(self, auth_client):
        for i in range(12):
            create(auth_client, symbol=f'S{i}')

        response = auth_client.get('/api/trades')

        assert response.status_code == 200
        assert len(response.get_json()) == 10

    def test_limit_and_order(self, app, auth_client):
        base = datetime(2024, 1, 1, 9, 0)
        for i in range(5):
            create(auth_client, symbol=f'S{i}')
        with app.app_context():
            for i, trade in enumerate(Trade.query.order_by(Trade.symbol).all()):
                trade.created_at = base + timedelta(minutes=i)
            db.session.commit()

        response = auth_client.get('/api/trades?limit=2')

        assert [t['symbol'] for t in response.get_json()] == ['S4', 'S3']

    @pytest.mark.parametrize('query', ['limit=abc', 'limit=0', 'start=2024-01-01', 'start=x&end=y'])
    def test_bad_query(self, auth_client, query):
        assert auth_client.get(f'/api/trades?{query}').status_code == 400

    def test_date_range(self, app, auth_client):
        for symbol in ('OLD', 'IN', 'NEW'):
            create(auth_client, symbol=symbol)
        with app.app_context():
            times = {'OLD': datetime(2024, 1, 1), 'IN': datetime(2024, 2, 1), 'NEW': datetime(2024, 3, 1)}
            for trade in Trade.query.all():
                trade.created_at = times[trade.symbol]
            db.session.commit()

        response = auth_client.get('/api/trades?start=2024-01-15T00:00:00&end=2024-02-15T00:00:00')

        assert response.status_code == 200
        assert [t['symbol'] for t in response.get_json()] == ['IN']


class TestUpdateTrade:

    def test_close_trade(self, auth_client):
        trade_id = create(auth_client).get_json()['id']

        response = auth_client.patch(f'/api/trades/{trade_id}', json={'exitPrice': '110.00'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'closed'
        assert data['pnl'] == '50.00'
        assert data['exitTime'] is not None

    def test_cannot_clear_exit_price(self, auth_client):
        trade_id = create(auth_client, exitPrice='110.00').get_json()['id']

        response = auth_client.patch(f'/api/trades/{trade_id}', json={'exitPrice': None})

        assert response.status_code == 400

    def test_client_cannot_set_status(self, auth_client):
        trade_id = create(auth_client).get_json()['id']

        response = auth_client.patch(f'/api/trades/{trade_id}', json={'status': 'closed', 'pnl': '1000'})

        data = response.get_json()
        assert data['status'] == 'open'
        assert data['pnl'] is None

    def test_unknown_trade(self, auth_client):
        response = auth_client.patch('/api/trades/does-not-exist', json={'notes': 'x'})
        assert response.status_code == 404
        assert response.get_json() == {'message': 'Trade not found'}


class TestDeleteTrade:

    def test_delete(self, app, auth_client):
        trade_id = create(auth_client).get_json()['id']

        response = auth_client.delete(f'/api/trades/{trade_id}')

        assert response.status_code == 204
        assert response.data == b''
        with app.app_context():
            assert Trade.query.count() == 0

    def test_delete_unknown_trade(self, auth_client):
        assert auth_client.delete('/api/trades/does-not-exist').status_code == 204


class TestTradingStats:

    def test_stats(self, auth_client):
        create(auth_client, exitPrice='110.00')
        create(auth_client, exitPrice='120.00')
        create(auth_client, exitPrice='95.00')
        create(auth_client)

        response = auth_client.get('/api/trading/stats')

        assert response.status_code == 200
        assert response.get_json() == {
            'todayTrades': 4,
            'yesterdayTrades': 0,
            'totalTrades': 4,
            'winRate': 66.67,
            'totalPnL': 125.0,
        }

    def test_stats_failure(self, auth_client):
        with patch('Trackr_app.api_routes.StatsService.get_trading_stats', side_effect=StoreError('count_trades')):
            response = auth_client.get('/api/trading/stats')

        assert response.status_code == 500
        assert response.get_json() == {'message': 'Failed to fetch trading stats'}


class TestOwnerIsolation:

    def test_users_cannot_touch_each_others_trades(self, app, client, make_user, login):
        make_user('user-a')
        make_user('user-b')

        login(client, 'user-b')
        theirs = create(client, symbol='B-ONLY').get_json()['id']

        login(client, 'user-a')
        assert client.get('/api/trades').get_json() == []
        assert client.patch(f'/api/trades/{theirs}', json={'exitPrice': '1.00'}).status_code == 404
        assert client.delete(f'/api/trades/{theirs}').status_code == 204
        assert client.get('/api/trading/stats').get_json()['totalTrades'] == 0

        with app.app_context():
            trade = db.session.get(Trade, theirs)
            assert trade is not None
            assert trade.status == 'open'


class TestPnlOverflow:

    def test_create_returns_400(self, auth_client):
        response = create(auth_client, quantity=2, entryPrice='0.01', exitPrice='99999999.99')

        assert response.status_code == 400
        data = response.get_json()
        assert data['message'] == 'Invalid trade data'
        assert data['errors'][0]['loc'] == ['pnl']
        assert auth_client.get('/api/trades').get_json() == []

    def test_update_returns_400_and_keeps_trade_open(self, auth_client):
        trade_id = create(auth_client, quantity=2, entryPrice='0.01').get_json()['id']

        response = auth_client.patch(f'/api/trades/{trade_id}', json={'exitPrice': '99999999.99'})

        assert response.status_code == 400
        assert response.get_json()['errors'][0]['loc'] == ['pnl']
        trade = auth_client.get('/api/trades').get_json()[0]
        assert trade['status'] == 'open'
        assert trade['exitPrice'] is None

    def test_quantity_beyond_column_range_returns_400(self, auth_client):
        response = create(auth_client, quantity=2_147_483_648)
        assert response.status_code == 400
