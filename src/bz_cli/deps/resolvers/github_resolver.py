"""Resolver for dependencies published as GitHub release assets."""

import os
from typing import Any, Dict, List, Optional

import requests

from ...core.token_manager import GitHubTokenManager, sanitize_token_error
from ...errors import DownloadError, UnresolvableCoordinateError
from ...models.coord import FuzzyCoord, LockedCoord
from ...models.version import Version, VersionPattern
from ...utils.console import _rich_debug, _rich_info
from ...utils.helpers import detect_os_arch
from .base import Resolver

GITHUB_SERVER = "github.com"
GITHUB_API_URL = "https://api.github.com"
ASSET_EXTENSIONS = ["zip", "tgz", "tar.gz"]
REQUEST_TIMEOUT = 30
RELEASES_PER_PAGE = 30


def _read_json(response: requests.Response, expected: type):
    """Decode a GitHub API response body, checking its top-level type.

    Raises:
        ValueError: If the body is not JSON or not of the expected type
    """
    try:
        data = response.json()
    except ValueError as e:
        raise ValueError(f"invalid JSON in GitHub API response: {e}") from e
    if not isinstance(data, expected):
        raise ValueError(f"unexpected GitHub API response, expected a JSON {expected.__name__}")
    return data


def possible_asset_names(coord: LockedCoord, os_arch: Optional[str] = None) -> List[str]:
    """Asset file names a release may carry for ``coord``, most specific first.

    For ``github.com/acme/tool@1.2.3`` on linux/amd64 this starts with
    ``tool-linux-amd64-v1.2.3.zip``, then ``tool-v1.2.3.zip``, then ``tool.zip``,
    and repeats the same for ``tgz`` and ``tar.gz``.
    """
    os_arch = os_arch or detect_os_arch()
    version = coord.version.canonical()
    names = []
    for ext in ASSET_EXTENSIONS:
        names.append(f"{coord.repo}-{os_arch}-v{version}.{ext}")
        names.append(f"{coord.repo}-v{version}.{ext}")
        names.append(f"{coord.repo}.{ext}")
    return names


class GitHubReleaseResolver(Resolver):
    """Resolves ``github.com/owner/repo[@version]`` against the releases API.

    - empty or ``0`` version: the latest release
    - exact version: the release tagged ``v<version>``
    - wildcard version, or an exact tag that does not exist: the highest
      non-draft release whose name matches the version pattern

    The locked version is parsed from the release name.
    """

    def __init__(
        self,
        token_manager: Optional[GitHubTokenManager] = None,
        session: Optional[requests.Session] = None,
        api_url: str = GITHUB_API_URL,
    ):
        """Initialize the resolver.

        Args:
            token_manager: Supplies the bearer token per server
            session: HTTP session to use (a new one by default)
            api_url: Base URL of the GitHub REST API
        """
        self.token_manager = token_manager or GitHubTokenManager()
        self.session = session or requests.Session()
        self.api_url = api_url.rstrip("/")

    def __str__(self) -> str:
        return "GitHubReleaseResolver()"

    def _headers(self, server: str, accept: str = "application/vnd.github+json") -> Dict[str, str]:
        headers = {"Accept": accept}
        token = self.token_manager.get_token_for_server(server)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _get(self, server: str, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        url = f"{self.api_url}{path}"
        _rich_debug(f"GET {url} {params or ''}")
        return self.session.get(url, headers=self._headers(server), params=params, timeout=REQUEST_TIMEOUT)

    def _get_release(self, coord, path: str) -> Optional[Dict[str, Any]]:
        """Fetch a single release; None when GitHub answers 404."""
        try:
            response = self._get(coord.server, path)
        except requests.RequestException as e:
            raise UnresolvableCoordinateError(coord, sanitize_token_error(str(e))) from e
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise UnresolvableCoordinateError(coord, f"GitHub API returned {response.status_code} for {path}")
        try:
            return _read_json(response, dict)
        except ValueError as e:
            raise UnresolvableCoordinateError(coord, str(e)) from e

    def _find_release_by_pattern(self, coord: FuzzyCoord) -> Optional[Dict[str, Any]]:
        """Page through all releases and keep the highest one matching the pattern."""
        pattern = VersionPattern.parse(coord.version)
        path = f"/repos/{coord.owner}/{coord.repo}/releases"
        url = f"{self.api_url}{path}"
        params = {"per_page": RELEASES_PER_PAGE}

        best = None
        best_version = None
        while url:
            _rich_debug(f"GET {url} {params or ''}")
            try:
                response = self.session.get(
                    url, headers=self._headers(coord.server), params=params, timeout=REQUEST_TIMEOUT
                )
            except requests.RequestException as e:
                raise UnresolvableCoordinateError(coord, sanitize_token_error(str(e))) from e
            if response.status_code != 200:
                raise UnresolvableCoordinateError(coord, f"GitHub API returned {response.status_code} for {path}")

            try:
                releases = _read_json(response, list)
            except ValueError as e:
                raise UnresolvableCoordinateError(coord, str(e)) from e

            for release in releases:
                if not isinstance(release, dict) or release.get("draft"):
                    continue
                version = Version.parse(self._release_version_string(release))
                if pattern.matches(version) and (best_version is None or version > best_version):
                    _rich_debug(f"release {release.get('name')} matches {pattern}")
                    best, best_version = release, version

            # The next link already carries the query string
            url = response.links.get("next", {}).get("url")
            params = None

        return best

    @staticmethod
    def _release_version_string(release: Dict[str, Any]) -> str:
        return release.get("name") or release.get("tag_name") or ""

    def resolve_coord(self, coord: FuzzyCoord) -> Optional[LockedCoord]:
        """Resolve a github.com coordinate to the version of a concrete release.

        Returns:
            LockedCoord, or None for coordinates on other servers

        Raises:
            UnresolvableCoordinateError: If no release matches or the API fails
        """
        if coord.server.lower() != GITHUB_SERVER:
            return None
        _rich_debug(f"GitHubReleaseResolver.resolve_coord({coord})")

        base = f"/repos/{coord.owner}/{coord.repo}/releases"
        if coord.version in ("", "0"):
            release = self._get_release(coord, f"{base}/latest")
        else:
            release = None
            if VersionPattern.parse(coord.version).is_exact():
                release = self._get_release(coord, f"{base}/tags/v{coord.version}")
            if release is None:
                release = self._find_release_by_pattern(coord)

        if release is None:
            raise UnresolvableCoordinateError(coord, "no matching release found")

        return LockedCoord(
            server=coord.server,
            owner=coord.owner,
            repo=coord.repo,
            version=Version.parse(self._release_version_string(release)),
        )

    def _select_asset(self, coord: LockedCoord, release: Dict[str, Any]) -> Dict[str, Any]:
        assets = {asset.get("name"): asset for asset in release.get("assets", [])}
        expected = possible_asset_names(coord)
        for name in expected:
            if name in assets:
                _rich_debug(f"found asset: {name}")
                return assets[name]
        raise DownloadError(f"Could not find any of assets {', '.join(expected)} in dependency {coord}")

    def download_resolved_coord(self, coord: LockedCoord, dest_dir: str) -> Optional[str]:
        """Download the best matching release asset into ``dest_dir``.

        The asset is streamed to ``<name>.tmp`` and renamed once complete.

        Returns:
            Path of the archive, or None for coordinates on other servers

        Raises:
            DownloadError: If the release, the asset or the transfer fails
        """
        if coord.server.lower() != GITHUB_SERVER:
            return None
        _rich_debug(f"GitHubReleaseResolver.download_resolved_coord({coord}, {dest_dir})")

        tag = f"v{coord.version.canonical()}"
        try:
            response = self._get(coord.server, f"/repos/{coord.owner}/{coord.repo}/releases/tags/{tag}")
        except requests.RequestException as e:
            raise DownloadError(f"Failed to fetch release {tag} of {coord}: {sanitize_token_error(str(e))}") from e
        if response.status_code != 200:
            raise DownloadError(f"GitHub API returned {response.status_code} for release {tag} of {coord}")

        try:
            release = _read_json(response, dict)
        except ValueError as e:
            raise DownloadError(f"Failed to read release {tag} of {coord}: {e}") from e

        asset = self._select_asset(coord, release)
        os.makedirs(dest_dir, exist_ok=True)
        target = os.path.join(dest_dir, asset["name"])
        tmp_target = f"{target}.tmp"

        _rich_info(f"Downloading {asset['name']} ...", symbol="download")
        asset_url = asset.get("url") or f"{self.api_url}/repos/{coord.owner}/{coord.repo}/releases/assets/{asset['id']}"
        try:
            with self.session.get(
                asset_url,
                headers=self._headers(coord.server, accept="application/octet-stream"),
                stream=True,
                timeout=REQUEST_TIMEOUT,
            ) as download:
                if download.status_code != 200:
                    raise DownloadError(f"Download of {asset['name']} failed with {download.status_code}")
                with open(tmp_target, "wb") as f:
                    for chunk in download.iter_content(chunk_size=8192):
                        if chunk:
                            f.write(chunk)
            os.replace(tmp_target, target)
        except (requests.RequestException, OSError) as e:
            if os.path.exists(tmp_target):
                os.remove(tmp_target)
            raise DownloadError(f"Failed to download {asset['name']}: {sanitize_token_error(str(e))}") from e
        except DownloadError:
            if os.path.exists(tmp_target):
                os.remove(tmp_target)
            raise

        _rich_info(f"Downloaded {target}")
        return target
