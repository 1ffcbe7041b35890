"""
Custom API Example

This example demonstrates defining an API of your own:
1. Write resolvers, one of them chaining two hops
2. Register them on an ApiDefinition
3. Drive calls through a RequestHandler

The upstream is simulated with httpx.MockTransport so the example runs
offline.

Run: python examples/01-custom-api/main.py
"""

import asyncio

import httpx

from relayer import (
    ActionResolver,
    ApiDefinition,
    RequestAction,
    ResponseAction,
    create_request_handler,
)
from relayer.config import AppSettings
from relayer.integrations import InMemorySecretStore, OutboundRequestRunner

# =============================================================================
# Resolvers
# =============================================================================


class WeatherResolver(ActionResolver):
    """
    Fetch a forecast, then answer with its summary.

    Sequence:
        None -> Request(forecast), continuation 1
        1    -> Response({"city": ..., "summary": ...})
    """

    @property
    def name(self) -> str:
        return "weather"

    def resolve(self, event, secret, previous):
        city = event.query("city", "Lisbon")
        if previous is None:
            return RequestAction(
                url="https://weather.example/forecast",
                parameters={"city": city},
                headers={"X-Api-Key": secret.get("weatherKey", "")},
                continuation=1,
            )

        return ResponseAction(body={"city": city, "summary": previous.body["summary"]})


def ping(event, secret, previous):
    return ResponseAction(headers={"Content-Type": "text/plain"}, body="pong")


# =============================================================================
# Simulated upstream
# =============================================================================


def forecast_upstream(request: httpx.Request) -> httpx.Response:
    city = request.url.params.get("city")
    return httpx.Response(200, json={"city": city, "summary": f"Sunny in {city}"})


# =============================================================================
# Main
# =============================================================================


async def main():
    settings = AppSettings(api_name="travel", api_version="v1", environment="demo")

    api = ApiDefinition(
        api_name=settings.api_name,
        api_version=settings.api_version,
        environment=settings.environment,
        has_secret=True,
    )
    api.register(WeatherResolver()).register_function("ping", ping)

    handler = create_request_handler(
        settings,
        api=api,
        secrets=InMemorySecretStore({"travel/demo": {"weatherKey": "demo-key"}}),
        runner=OutboundRequestRunner(
            client=httpx.AsyncClient(transport=httpx.MockTransport(forecast_upstream))
        ),
    )

    print(f"API: {api}")
    print()

    for event in [
        {"path": "/travel/v1/ping", "httpMethod": "GET"},
        {"path": "/travel/v1/weather", "httpMethod": "GET", "queryStringParameters": {"city": "Porto"}},
        {"path": "/travel/v1/missing", "httpMethod": "GET"},
    ]:
        response = await handler.handle(event)
        print(f"{event['path']}: {response['statusCode']} {response['body']}")

    await handler.close()


if __name__ == "__main__":
    asyncio.run(main())
