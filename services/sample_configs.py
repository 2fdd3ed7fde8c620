"""Bundled sample configuration files served under /getconfig/."""

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from core.exceptions import ConfigNotFound

SAMPLES_DIR = Path(__file__).parent / "getconfig"

CONTENT_TYPES = {
    ".json": "application/json",
    ".xml": "application/xml",
    ".yaml": "application/yaml",
    ".yml": "application/yaml",
    ".conf": "text/plain",
}


class SampleConfigStore:
    """Read-only mapping of sample file name to content, loaded once."""

    def __init__(self, files: Mapping[str, bytes]) -> None:
        self._files = MappingProxyType(dict(files))

    @classmethod
    def from_directory(cls, root: Path = SAMPLES_DIR) -> "SampleConfigStore":
        files = {
            path.relative_to(root).as_posix(): path.read_bytes()
            for path in sorted(root.rglob("*"))
            if path.is_file()
        }
        return cls(files)

    def names(self) -> list[str]:
        return sorted(self._files)

    def get(self, name: str) -> bytes:
        try:
            return self._files[name]
        except KeyError:
            raise ConfigNotFound(name) from None

    @staticmethod
    def content_type(name: str) -> str:
        return CONTENT_TYPES.get(Path(name).suffix.lower(), "text/plain")

    def listing(self) -> str:
        """Plain-text index of the available files."""
        lines = ["Available configuration files:", ""]
        lines.extend(f"- {name}" for name in self.names())
        lines.extend(["", "Usage: GET /getconfig/{filename}", ""])
        return "\n".join(lines)
