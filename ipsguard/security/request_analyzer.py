import json
from typing import Any
from urllib.parse import parse_qs
from fastapi import Request
from ipsguard.security.request_classifier import InspectedRequest


class RequestAnalyzer:
    async def analyze(self, request: Request) -> InspectedRequest:
        return InspectedRequest(
            method=request.method,
            path=str(request.url.path),
            query_params=self._flatten(
                {key: request.query_params.getlist(key) for key in request.query_params.keys()}
            ),
            path_params=dict(request.path_params),
            body=await self._read_body(request),
            headers=dict(request.headers),
            client_host=request.client.host if request.client else None
        )

    async def _read_body(self, request: Request) -> Any:
        raw = await request.body()
        if not raw:
            return None

        text = raw.decode("utf-8", errors="replace")
        content_type = request.headers.get("content-type", "")

        if content_type.startswith("application/json"):
            try:
                return json.loads(text)
            except ValueError:
                return text

        if content_type.startswith("application/x-www-form-urlencoded"):
            return self._flatten(parse_qs(text, keep_blank_values=True))

        return text

    def _flatten(self, params: dict[str, list[str]]) -> dict[str, Any]:
        return {key: values[0] if len(values) == 1 else values for key, values in params.items()}
