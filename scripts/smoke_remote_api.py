import json
import os
import sys

from fastapi.testclient import TestClient
from app.main import create_app
from app.core.config import Settings

"""Smoke check against a live expenses service.

Loads the collection through the dashboard, asks for the summary, then tries a
currency switch (default EUR, first CLI arg overrides) and prints what the
dashboard ends up showing. Point API_BASE_URL at the service before running.
NOTE: diagnostic only; it does not create or delete anything.
"""


def run(target_currency: str = "EUR"):
    settings = Settings()
    settings.init_post_load()
    app = create_app(settings_override=settings)
    with TestClient(app) as client:
        listing = client.get("/expenses").json()
        summary_before = client.get("/analytics/summary").json()
        switched = client.post(f"/currency/{target_currency}").json()
        summary_after = client.get("/analytics/summary").json()

    print(
        json.dumps(
            {
                "api_base_url": settings.api_base_url,
                "loaded": listing.get("total"),
                "summary_before": summary_before,
                "currency_switch": switched,
                "summary_after": summary_after,
            },
            indent=2,
            ensure_ascii=False,
        )
    )


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    run(sys.argv[1] if len(sys.argv) > 1 else "EUR")
