import sys
import os

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import Config
from billing_core import create_client
from billing_core.services.analytics_service import AnalyticsView
from billing_core.utils.formatters import money_in


def print_overview(view):
    overview = view.overview or {}
    print(f"[{view.period}] sales {money_in(overview.get('totalSales'), Config.CURRENCY_CODE)}"
          f" | purchases {money_in(overview.get('totalPurchases'), Config.CURRENCY_CODE)}"
          f" | expenses {money_in(overview.get('totalExpenses'), Config.CURRENCY_CODE)}")
    if view.error:
        print(f"  error: {view.error}")


def watch_analytics(date_range=None):
    client = create_client()
    view = AnalyticsView(client, date_range or Config.ANALYTICS_DEFAULT_RANGE)
    view.refresh()
    print_overview(view)

    # Consume in the foreground; Ctrl+C tears the channel down
    subscriber = view.subscribe(background=False)
    subscriber.on_update = lambda: (view.refresh(), print_overview(view))
    subscriber.on_snapshot = lambda payload: (view.apply_snapshot(payload), print_overview(view))
    try:
        subscriber.run()
    except KeyboardInterrupt:
        pass
    finally:
        view.close()
    print("Live updates closed.")


if __name__ == "__main__":
    watch_analytics(sys.argv[1] if len(sys.argv) > 1 else None)
