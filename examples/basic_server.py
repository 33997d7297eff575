"""Minimal relay server example."""

import uvicorn

from slack_relay_proxy import RelayConfig, create_app

app = create_app(
    RelayConfig(
        webhook_url="https://hooks.slack.com/services/YOUR/WEBHOOK/URL",
        port=3000,
        timeout_seconds=10,
    )
)


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=3000)
