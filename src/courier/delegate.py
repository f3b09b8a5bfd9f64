"""Client delegate: hooks into the request/response cycle.

A delegate is the single policy object bound to a client. It can rewrite
requests before they are sent (auth tokens, tracing headers), decide whether a
failed request is worth one more attempt (re-authentication of short lived
tokens) and translate unacceptable responses into domain errors.

Subclass ``DefaultClientDelegate`` and override only the hooks you need. Hooks
may be plain methods or coroutines; the client awaits whatever they return.

Example:
    Re-authenticating once on 401::

        class AuthDelegate(DefaultClientDelegate):
            def __init__(self, tokens):
                self.tokens = tokens

            def will_send_request(self, client, request):
                set_bearer_token(request, self.tokens.current)

            async def should_client_retry(self, client, error):
                if isinstance(error, InvalidResponseError) and error.status_code == 401:
                    await self.tokens.refresh()
                    return True
                return False
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Protocol, Union, runtime_checkable

from .errors import InvalidResponseError

if TYPE_CHECKING:
    import httpx

    from .client import HTTPClient


@runtime_checkable
class HTTPClientDelegate(Protocol):
    """Protocol for client delegates."""

    def will_send_request(self, client: HTTPClient, request: httpx.Request) -> Union[None, Awaitable[None]]:
        """Called right before the request is sent; may mutate ``request`` in place."""
        ...

    def should_client_retry(self, client: HTTPClient, error: Exception) -> Union[bool, Awaitable[bool]]:
        """Return ``True`` to retry the request once after ``error``."""
        ...

    def did_receive_invalid_response(
        self, client: HTTPClient, response: httpx.Response, data: bytes
    ) -> Union[Exception, Awaitable[Exception]]:
        """Return the error to raise for a response with a non-2xx status."""
        ...


class DefaultClientDelegate:
    """Delegate with the default behavior for every hook."""

    def will_send_request(self, client: HTTPClient, request: httpx.Request) -> None:
        pass

    def should_client_retry(self, client: HTTPClient, error: Exception) -> bool:
        return False

    def did_receive_invalid_response(self, client: HTTPClient, response: httpx.Response, data: bytes) -> Exception:
        return InvalidResponseError(response)
