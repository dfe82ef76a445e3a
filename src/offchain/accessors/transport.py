from __future__ import annotations

import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Protocol


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self, limit: int = 300) -> str:
        return self.body.decode("utf-8", errors="replace").strip()[:limit]


class HttpTransport(Protocol):
    def request(
        self,
        method: str,
        url: str,
        *,
        body: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout_s: float = 10.0,
    ) -> HttpResponse: ...


class UrllibTransport:
    """Blocking stdlib HTTP transport.

    Never raises for HTTP or network failures: an HTTP error keeps its
    status code and body, a network failure is reported as status 0 with
    the error text as body. Callers decide which statuses are fatal.
    """

    def request(
        self,
        method: str,
        url: str,
        *,
        body: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout_s: float = 10.0,
    ) -> HttpResponse:
        req = urllib.request.Request(url=url, method=method.upper(), data=body)
        req.add_header("Accept", "application/json")
        for k, v in (headers or {}).items():
            req.add_header(k, v)

        try:
            with urllib.request.urlopen(req, timeout=timeout_s) as resp:
                status = int(getattr(resp, "status", 200))
                return HttpResponse(status, resp.read(), {k.lower(): v for k, v in resp.headers.items()})
        except urllib.error.HTTPError as e:
            try:
                raw = e.read()
            except OSError:
                raw = str(e).encode("utf-8")
            hdrs = {k.lower(): v for k, v in e.headers.items()} if e.headers else {}
            return HttpResponse(int(getattr(e, "code", 0) or 0), raw or str(e).encode("utf-8"), hdrs)
        except (urllib.error.URLError, OSError, ValueError) as e:
            return HttpResponse(0, str(e).encode("utf-8"), {})
