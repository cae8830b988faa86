"""Self-extracting (SFX) package builder.

An SFX package is the concatenation of a 7-Zip SFX stub module, an
optional installer config block, and a 7z archive::

    [7zS2.sfx | 7zsd_All.sfx] + [sfx_info.txt] + [<name>.sfx.7z]

The inner archive and config block are built in a scratch workspace under
the cache root which is always removed when create() returns. The
manifest is keyed to the final package, not the inner archive, so an
unchanged source tree short-circuits the whole build.
"""

import logging
import shutil
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

from arcsync.backends.discovery import find_seven_zip_executable
from arcsync.core.config import ArcsyncConfig
from arcsync.core.errors import (
    CodecNotFoundError,
    InvalidSfxPathError,
    ManifestError,
    SfxAssemblyFailedError,
)
from arcsync.core.manifest import ChecksumManifest
from arcsync.core.paths import get_sfx_workspace_root
from arcsync.core.planner import SyncPlanner
from arcsync.core.session import ArchiveSession
from arcsync.models.entry import SyncResult
from arcsync.models.policy import ArchiveType, SyncPolicy

logger = logging.getLogger(__name__)

INFO_HEADER = ";!@Install@!UTF-8!"
INFO_FOOTER = ";!@InstallEnd@!"
INFO_FILENAME = "sfx_info.txt"

# Stub module supporting an installer config block
STUB_WITH_INFO = "7zsd_All.sfx"
# Minimal stub, extracts only
STUB_MINIMAL = "7zS2.sfx"


def create_info_block(options: Mapping[str, str]) -> str:
    """Serialize installer options into a 7-Zip SFX config block.

    Common keys: Title, BeginPrompt, Progress ("yes"/"no"), RunProgram,
    InstallPath, Delete, ExecuteFile, ExecuteParameters. Use double
    backslashes in Windows paths. Any key is written verbatim.

    Args:
        options: Option name to value.

    Returns:
        Config block text framed by the install markers.
    """
    lines = [INFO_HEADER]
    lines.extend(f'{key}="{value}"' for key, value in options.items())
    lines.append(INFO_FOOTER)
    return "\n".join(lines)


class SfxBuilder:
    """Builds a self-extracting package from a source tree.

    The builder owns a 7z ArchiveSession for the inner archive; it does not
    extend it.

    Attributes:
        sfx_path: Absolute path of the package to create.
        workspace: Scratch directory for intermediate artifacts.
        inner_archive_path: 7z archive built inside the workspace.
        manifest: Manifest bound to the final package.
    """

    def __init__(
        self,
        sfx_path: Path,
        *,
        temp_subfolder: str | None = None,
        policy: SyncPolicy | None = None,
        manifest: ChecksumManifest | None = None,
        config: ArcsyncConfig | None = None,
        stub_dir: Path | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            sfx_path: Package to create, including a file name.
            temp_subfolder: Workspace folder name under the cache root.
                Defaults to the package name without extension.
            policy: Sync policy; its archive type is forced to 7z.
            manifest: Manifest to use instead of the persisted one.
            config: arcsync configuration.
            stub_dir: Directory holding the SFX stub modules.

        Raises:
            InvalidSfxPathError: If sfx_path has no file name or the
                workspace subfolder is empty.
            ManifestCorruptError: If the persisted manifest is corrupt.
        """
        basename = sfx_path.stem if sfx_path.suffix else sfx_path.name
        if not basename or sfx_path.is_dir():
            msg = (
                "SFX path was not complete! Ensure the path includes a filename.\n"
                f"  path: {sfx_path}"
            )
            raise InvalidSfxPathError(msg)
        subfolder = basename if temp_subfolder is None else temp_subfolder
        if not subfolder:
            raise InvalidSfxPathError("Subfolder provided for the SFX workspace was empty!")

        self.config = config or ArcsyncConfig()
        self.sfx_path = sfx_path.absolute()
        self.workspace = get_sfx_workspace_root(self.config.cache_root) / subfolder
        self.inner_archive_path = self.workspace / f"{basename}.sfx.7z"
        self.policy = (policy or SyncPolicy()).model_copy(
            update={"archive_type": ArchiveType.SEVEN_ZIP}
        )
        if manifest is None:
            manifest = ChecksumManifest.for_archive(self.sfx_path, self.config.cache_root)
        self.manifest = manifest
        self._stub_dir = stub_dir
        self._info_path: Path | None = None

    @contextmanager
    def _workspace(self) -> Iterator[Path]:
        self.workspace.mkdir(parents=True, exist_ok=True)
        try:
            yield self.workspace
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        """Delete the workspace and everything in it."""
        logger.debug("Removing SFX workspace %s", self.workspace)
        shutil.rmtree(self.workspace, ignore_errors=True)
        self._info_path = None

    def create_info_file(self, options: Mapping[str, str] | None) -> Path | None:
        """Write the installer config block into the workspace.

        Args:
            options: Installer options. Nothing is written when empty.

        Returns:
            Path of the written file, or None.
        """
        if not options:
            return None
        path = self.workspace / INFO_FILENAME
        path.write_text(create_info_block(options), encoding="utf-8")
        self._info_path = path
        return path

    def resolve_stub(self, with_info: bool) -> Path:
        """Locate the SFX stub module to prepend.

        Args:
            with_info: Whether an installer config block is included.

        Returns:
            Path of the stub module.

        Raises:
            SfxAssemblyFailedError: If the stub cannot be found.
        """
        stub_dir = self._stub_dir or self.config.sfx_stub_dir or self.config.seven_zip_home
        if stub_dir is None:
            try:
                stub_dir = find_seven_zip_executable(self.config).parent
            except CodecNotFoundError as e:
                raise SfxAssemblyFailedError(f"Cannot locate SFX stub modules: {e}") from e

        stub = stub_dir / (STUB_WITH_INFO if with_info else STUB_MINIMAL)
        if not stub.is_file():
            raise SfxAssemblyFailedError(f"SFX stub module not found: {stub}")
        return stub

    def create(
        self,
        source_root: Path,
        candidate_specs: Iterable[str] | None = None,
        info_options: Mapping[str, str] | None = None,
    ) -> SyncResult:
        """Create (or refresh) the SFX package.

        Args:
            source_root: Root that archive-relative paths are derived from.
            candidate_specs: Literal paths or globs; None means everything.
            info_options: Installer options; see create_info_block().

        Returns:
            SyncResult bound to the final package.

        Raises:
            ArchiveCreationFailedError: If the inner archive cannot be built.
            SfxAssemblyFailedError: If the package cannot be assembled.
        """
        source_root = source_root.absolute()
        specs = list(candidate_specs) if candidate_specs is not None else None

        with self._workspace():
            if not self.sfx_path.is_file():
                self.manifest.clear()
            changed = SyncPlanner(self.policy).plan_add(source_root, specs, self.manifest)
            if not changed and self.sfx_path.is_file():
                logger.info("No files in the SFX have changed. Skipping SFX creation.")
                return SyncResult(
                    archive_path=self.sfx_path,
                    manifest_path=None,
                    checksums=self.manifest.snapshot(),
                )

            logger.info("Creating SFX archive: %s", self.sfx_path)
            # The workspace is fresh, so the inner archive is always rebuilt in full
            session = ArchiveSession(
                self.inner_archive_path,
                self.policy,
                ChecksumManifest(self.inner_archive_path, self.config.cache_root),
                config=self.config,
                defer_persist=True,
            )
            inner = session.add(source_root, specs)

            info_path = self.create_info_file(info_options)
            stub = self.resolve_stub(with_info=info_path is not None)
            self._assemble([stub, *([info_path] if info_path else []), self.inner_archive_path])

            self.manifest.clear()
            for path in session.manifest.entry_paths():
                self.manifest.set(path, inner.checksums[path])
            try:
                manifest_path = self.manifest.persist()
            except ManifestError as e:
                raise SfxAssemblyFailedError(f"Failed to record SFX manifest: {e}") from e

            logger.info("SFX created successfully.")
            return SyncResult(
                archive_path=self.sfx_path,
                manifest_path=manifest_path,
                checksums=self.manifest.snapshot(),
                processed=inner.processed,
            )

    def _assemble(self, components: list[Path]) -> None:
        try:
            self.sfx_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.sfx_path, "wb") as sfx:
                for component in components:
                    logger.debug("Adding %s to SFX", component)
                    with open(component, "rb") as part:
                        shutil.copyfileobj(part, sfx)
        except OSError as e:
            raise SfxAssemblyFailedError(f"Failed to assemble {self.sfx_path}: {e}") from e


def create_sfx(
    sfx_path: Path,
    source_root: Path,
    *,
    candidate_specs: Iterable[str] | None = None,
    info_options: Mapping[str, str] | None = None,
    temp_subfolder: str | None = None,
    policy: SyncPolicy | None = None,
    config: ArcsyncConfig | None = None,
    stub_dir: Path | None = None,
) -> SyncResult:
    """Create an SFX package in one call.

    See SfxBuilder and SfxBuilder.create() for the parameters.
    """
    builder = SfxBuilder(
        sfx_path,
        temp_subfolder=temp_subfolder,
        policy=policy,
        config=config,
        stub_dir=stub_dir,
    )
    return builder.create(source_root, candidate_specs, info_options)
