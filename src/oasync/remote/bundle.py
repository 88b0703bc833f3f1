"""Zip packing of Apigee proxy bundles."""

import io
import zipfile
from pathlib import Path

from oasync.errors import LocalIOError

BUNDLE_ROOT = "apiproxy"


def unpack_bundle(data: bytes, target_dir: Path) -> list[Path]:
    """Extract a proxy bundle into ``target_dir`` and return the written files."""
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    root = target_dir.resolve()
    written = []
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise LocalIOError(target_dir, f"bundle is not a zip archive ({e})") from e

    with archive:
        for info in archive.infolist():
            dest = (target_dir / info.filename).resolve()
            if dest != root and root not in dest.parents:
                raise LocalIOError(target_dir, f"bundle entry escapes target: {info.filename}")
            if info.is_dir():
                dest.mkdir(parents=True, exist_ok=True)
                continue
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(archive.read(info))
            written.append(dest)
    return written


def pack_bundle(proxy_dir: Path) -> bytes:
    """Zip the ``apiproxy/`` tree of a proxy directory."""
    proxy_dir = Path(proxy_dir)
    source = proxy_dir / BUNDLE_ROOT
    if not source.is_dir():
        raise LocalIOError(source, "no apiproxy directory to bundle")

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as archive:
        for path in sorted(source.rglob("*")):
            if path.is_file():
                archive.write(path, path.relative_to(proxy_dir).as_posix())
    return buf.getvalue()
