import httpx


def mock_client(handler) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler(request)``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def record_requests(responder):
    """Wrap ``responder`` so every request it answers is kept in ``handler.requests``."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return responder(request)

    handler.requests = requests
    return handler
