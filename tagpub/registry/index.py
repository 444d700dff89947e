"""Read-only visibility checks against the registry API."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from tagpub.core.result import Err, Ok, Result
from tagpub.core.structured import as_str_dict, get_str, get_table
from tagpub.registry.http import HttpClient, HttpError


@dataclass(frozen=True, slots=True)
class RegistryIndex:
    """Answers "can consumers resolve ``name@version`` yet?".

    Uses ``GET {api_url}/crates/{name}/{version}``: 200 with a matching
    ``version.num`` means visible, 404 means not visible yet.
    """

    api_url: str
    http: HttpClient

    def version_url(self, name: str, version: str) -> str:
        return f"{self.api_url.rstrip('/')}/crates/{quote(name, safe='')}/{quote(version, safe='')}"

    def is_visible(self, name: str, version: str) -> Result[bool, HttpError]:
        url = self.version_url(name, version)
        result = self.http.get_json(url)
        if isinstance(result, Err):
            if result.error.status == 404:
                return Ok(False)
            return result

        data = as_str_dict(result.value)
        version_obj = get_table(data, "version") if data is not None else None
        if version_obj is None:
            return Err(HttpError(url=url, status=0, message="missing 'version' in payload"))
        return Ok(get_str(version_obj, "num") == version)
