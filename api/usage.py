"""Plain-text usage help."""

from typing import Literal

Section = Literal["all", "proxy", "config"]


def usage_text(section: Section = "all") -> str:
    lines = [
        "CORS Proxy Usage:",
        "GET /proxy/{url} - Proxy to the specified URL",
        "GET /getconfig/{filename} - Get embedded configuration file",
    ]

    if section in ("proxy", "all"):
        lines += [
            "",
            "Proxy Examples:",
            "  - GET /proxy/https://api.example.com/data",
            "  - GET /proxy/?target=https://api.example.com/data",
            "  - GET /proxy?target=https%3A%2F%2Fapi.example.com%2Fsearch%3Fq%3D1&page=2",
        ]

    if section in ("config", "all"):
        lines += [
            "",
            "Config Examples:",
            "  - GET /getconfig/",
            "  - GET /getconfig/nginx.conf",
        ]

    return "\n".join(lines) + "\n"
