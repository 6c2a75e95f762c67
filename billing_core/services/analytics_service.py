"""Analytics view state with live refresh."""
import logging
import threading
from typing import Any, Dict, List, Optional

import requests

from billing_core.services.live_refresh_service import LiveRefreshSubscriber

logger = logging.getLogger(__name__)

OVERVIEW_PATH = '/api/analytics/overview'
TOP_PRODUCTS_PATH = '/api/analytics/top-products'
TOP_CUSTOMERS_PATH = '/api/analytics/top-customers'
PAYMENTS_PATH = '/api/analytics/payments'
UPDATE_PATH = '/api/analytics/update'
STREAM_PATH = '/api/analytics/stream'

PERIOD_MAP = {
    '7': '7days',
    '30': '30days',
    '90': '90days',
    '365': '1year',
}
DEFAULT_PERIOD = '30days'


def period_for(date_range: str) -> str:
    """Map a UI date range ('7', '30', ...) to the API period name."""
    return PERIOD_MAP.get(str(date_range), DEFAULT_PERIOD)


def map_snapshot(analytics: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Convert a stream snapshot into the shapes the REST endpoints return.

    Returns a dict with 'overview', 'top_products', 'top_customers'
    and 'payment_analytics' keys.
    """
    analytics = analytics or {}
    payment_methods = [
        {'_id': pm.get('method'), 'total': pm.get('total'), 'count': pm.get('count')}
        for pm in analytics.get('paymentMethods') or []
    ]
    flow = analytics.get('paymentFlow') or {}
    money_in = flow.get('moneyIn') or {}
    money_out = flow.get('moneyOut') or {}

    return {
        'overview': {
            'totalSales': analytics.get('totalSales') or 0,
            'totalPurchases': analytics.get('totalPurchases') or 0,
            'totalExpenses': analytics.get('totalExpenses') or 0,
            'paymentMethods': payment_methods,
            'salesByDate': [
                {'_id': sd.get('date'), 'total': sd.get('sales'), 'count': sd.get('orders')}
                for sd in analytics.get('salesByDate') or []
            ],
        },
        'top_products': [
            {
                '_id': p.get('productName'),
                'totalQuantity': p.get('totalQuantity'),
                'totalAmount': p.get('totalAmount'),
                'count': p.get('orderCount'),
            }
            for p in analytics.get('topProducts') or []
        ],
        'top_customers': [
            {
                '_id': c.get('customerName'),
                'totalAmount': c.get('totalAmount'),
                'invoiceCount': c.get('invoiceCount'),
                'avgOrderValue': c.get('avgOrderValue'),
            }
            for c in analytics.get('topCustomers') or []
        ],
        'payment_analytics': {
            'paymentFlow': [
                {'_id': 'Received', 'total': money_in.get('total') or 0, 'count': money_in.get('count') or 0},
                {'_id': 'Paid', 'total': money_out.get('total') or 0, 'count': money_out.get('count') or 0},
            ],
            'paymentMethods': payment_methods,
            'dailyPayments': [
                {'_id': dp.get('date'), 'received': dp.get('received'), 'paid': dp.get('paid')}
                for dp in analytics.get('dailyPayments') or []
            ],
        },
    }


class AnalyticsView:
    """
    Business insights for one date range.

    State is replaced wholesale by refresh() or by a stream snapshot;
    an `update` signal from the stream triggers refresh().
    """

    def __init__(self, client, date_range: str = '30', start_date: Optional[str] = None,
                 end_date: Optional[str] = None):
        self.client = client
        self.date_range = str(date_range)
        self.start_date = start_date
        self.end_date = end_date

        self.overview: Optional[Dict[str, Any]] = None
        self.top_products: List[Dict[str, Any]] = []
        self.top_customers: List[Dict[str, Any]] = []
        self.payment_analytics: Optional[Dict[str, Any]] = None
        self.error = ''
        self.loading = False

        self._lock = threading.Lock()
        self._subscriber: Optional[LiveRefreshSubscriber] = None

    @property
    def period(self) -> str:
        return period_for(self.date_range)

    def _params(self) -> Dict[str, str]:
        params = {'period': self.period}
        if self.start_date:
            params['startDate'] = self.start_date
        if self.end_date:
            params['endDate'] = self.end_date
        return params

    def refresh(self) -> bool:
        """Re-fetch all four analytics endpoints. Returns False on error."""
        params = self._params()
        with self._lock:
            self.loading = True
            self.error = ''
        try:
            responses = [
                self.client.get(path, params)
                for path in (OVERVIEW_PATH, TOP_PRODUCTS_PATH, TOP_CUSTOMERS_PATH, PAYMENTS_PATH)
            ]
            # Non-2xx bodies are not parsed; a 2xx body that is not JSON fails the refresh
            overview, products, customers, payments = [
                response.json() if response.ok else None for response in responses
            ]
        except (requests.RequestException, ValueError) as e:
            logger.error(f"[ANALYTICS] Refresh of {self.period} failed: {e}")
            with self._lock:
                self.error = 'Network error. Please try again.'
            return False
        else:
            with self._lock:
                if responses[0].ok:
                    self.overview = overview
                else:
                    self.error = 'Failed to fetch overview data'
                    logger.warning(f"[ANALYTICS] Overview answered {responses[0].status_code}")
                if products is not None:
                    self.top_products = products
                if customers is not None:
                    self.top_customers = customers
                if payments is not None:
                    self.payment_analytics = payments
                return not self.error
        finally:
            with self._lock:
                self.loading = False

    def apply_snapshot(self, payload: Dict[str, Any]) -> None:
        """Replace state with a full snapshot pushed by the stream."""
        mapped = map_snapshot((payload or {}).get('analytics'))
        with self._lock:
            self.overview = mapped['overview']
            self.top_products = mapped['top_products']
            self.top_customers = mapped['top_customers']
            self.payment_analytics = mapped['payment_analytics']
            self.error = ''
        logger.debug(f"[ANALYTICS] Snapshot applied for {self.period}")

    def request_update(self) -> bool:
        """Ask the backend to recompute analytics, then re-fetch."""
        with self._lock:
            self.error = ''
        try:
            response = self.client.post(UPDATE_PATH, {'period': self.period})
        except requests.RequestException as e:
            logger.error(f"[ANALYTICS] Network error requesting update: {e}")
            with self._lock:
                self.error = 'Network error while updating analytics'
            return False

        if not response.ok:
            logger.warning(f"[ANALYTICS] Update request answered {response.status_code}")
            with self._lock:
                self.error = 'Failed to update analytics'
            return False
        return self.refresh()

    def set_range(self, date_range: str, start_date: Optional[str] = None,
                  end_date: Optional[str] = None) -> None:
        """Change the date range; an open subscription is re-opened for the new period."""
        was_subscribed = self._subscriber is not None and not self._subscriber.closed
        self.date_range = str(date_range)
        self.start_date = start_date
        self.end_date = end_date
        if was_subscribed:
            self.close()
            self.subscribe()
        self.refresh()

    def _on_channel_error(self, error) -> None:
        logger.info(f"[ANALYTICS] Live updates off for {self.period}: {error.message}")

    def subscribe(self, background: bool = True) -> LiveRefreshSubscriber:
        """Open the push channel for the current period."""
        if self._subscriber is not None and not self._subscriber.closed:
            return self._subscriber
        self._subscriber = LiveRefreshSubscriber(
            self.client,
            STREAM_PATH,
            on_update=self.refresh,
            on_snapshot=self.apply_snapshot,
            on_error=self._on_channel_error,
            params={'period': self.period},
        )
        if background:
            self._subscriber.start()
        return self._subscriber

    def close(self) -> None:
        """Tear down the push channel when the view goes away."""
        if self._subscriber is not None:
            self._subscriber.close()
            self._subscriber = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
