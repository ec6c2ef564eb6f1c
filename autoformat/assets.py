"""Resolution of bundled JS/CSS modules for templates.

Templates call ``{{ modules("src/main.ts") }}`` to get the tags that load an
entry point. In development the tags point at the Vite dev server; in
production they are read from the Vite build manifest.
"""

import json
from pathlib import Path

from markupsafe import Markup, escape

from autoformat.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


class AssetResolutionError(LookupError):
    """A module name could not be resolved to built assets."""


class ViteAssets:
    """Turns module names into <script>/<link> tags."""

    def __init__(self, manifest_path: Path, base_url: str, dev_server: str, dev: bool = False):
        self.manifest_path = manifest_path
        self.base_url = base_url
        self.dev_server = dev_server.rstrip("/")
        self.dev = dev
        self._manifest: dict[str, dict] | None = None

    def load(self) -> None:
        """Read the build manifest.

        A missing manifest only disables resolution (modules() then raises at
        render time). A manifest that exists but cannot be parsed raises.

        Raises:
            ValueError: If the manifest is not a JSON object
        """
        if self.dev:
            return

        if not self.manifest_path.exists():
            log_with_context(
                logger,
                "warning",
                "Asset manifest not found, modules() will fail until assets are built",
                manifest=str(self.manifest_path),
                event_type="assets_manifest_missing",
            )
            return

        try:
            data = json.loads(self.manifest_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Asset manifest {self.manifest_path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Asset manifest {self.manifest_path} must contain a JSON object")

        self._manifest = data
        log_with_context(
            logger,
            "debug",
            "Asset manifest loaded",
            entries=len(data),
            event_type="assets_manifest_loaded",
        )

    def __call__(self, name: str) -> Markup:
        """Template function: tags for module `name`."""
        if self.dev:
            return self._dev_tags(name)
        return self._build_tags(name)

    def _dev_tags(self, name: str) -> Markup:
        client = escape(f"{self.dev_server}/@vite/client")
        entry = escape(f"{self.dev_server}/{name.lstrip('/')}")
        return Markup(
            f'<script type="module" src="{client}"></script>\n<script type="module" src="{entry}"></script>'
        )

    def _build_tags(self, name: str) -> Markup:
        if self._manifest is None:
            raise AssetResolutionError(f"No asset manifest loaded, cannot resolve module {name!r}")

        entry = self._manifest.get(name)
        if entry is None:
            raise AssetResolutionError(f"Module {name!r} is not in the asset manifest")

        css: list[str] = []
        preloads: list[str] = []
        self._collect(name, css, preloads, seen=set())

        tags = [f'<link rel="stylesheet" href="{escape(self._url(href))}">' for href in css]
        tags.extend(f'<link rel="modulepreload" href="{escape(self._url(href))}">' for href in preloads)
        tags.append(f'<script type="module" src="{escape(self._url(entry["file"]))}"></script>')
        return Markup("\n".join(tags))

    def _collect(self, key: str, css: list[str], preloads: list[str], seen: set[str]) -> None:
        """Walk the import graph of `key`, gathering stylesheets and chunks in order."""
        if key in seen:
            return
        seen.add(key)

        chunk = self._manifest.get(key, {}) if self._manifest else {}
        for imported in chunk.get("imports", []):
            self._collect(imported, css, preloads, seen)
            imported_file = self._manifest.get(imported, {}).get("file") if self._manifest else None
            if imported_file and imported_file not in preloads:
                preloads.append(imported_file)

        for href in chunk.get("css", []):
            if href not in css:
                css.append(href)

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"
