"""Pydantic models for parsed links and fetched link metadata."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ParsedURL(BaseModel):
    """Structured decomposition of a validated absolute URL."""

    model_config = ConfigDict(frozen=True)

    scheme: str
    host: str
    port: int | None = None
    userinfo: str | None = None
    path: str = ""
    query: str = ""
    fragment: str = ""

    @property
    def netloc(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        netloc = host if self.port is None else f"{host}:{self.port}"
        if self.userinfo is not None:
            netloc = f"{self.userinfo}@{netloc}"
        return netloc

    @property
    def display_url(self) -> str:
        """Host, path and query without the scheme, for compact display."""
        query = f"?{self.query}" if self.query else ""
        return f"{self.host}{self.path}{query}"

    def geturl(self) -> str:
        """Reassemble the URL string."""
        url = f"{self.scheme}://{self.netloc}{self.path}"
        if self.query:
            url += f"?{self.query}"
        if self.fragment:
            url += f"#{self.fragment}"
        return url

    def __str__(self) -> str:
        return self.geturl()


class LinkMetadata(BaseModel):
    """Title, host and thumbnail describing a linked page."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    host: str
    image_url: str | None = None
    description: str | None = None
    url: str | None = None
