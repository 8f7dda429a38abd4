"""Dash docset layout around the rendered manual and its search index.

See https://kapeli.com/docsets#dashDocset for the expected structure::

    PHP_en.docset/
        icon.png, icon@2x.png
        Contents/Info.plist
        Contents/Resources/docSet.dsidx
        Contents/Resources/Documents/...
"""

from __future__ import annotations

import logging
import plistlib
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from phpdocset.config import INDEX_FILENAME, AppConfig, get_lang_name
from phpdocset.index.builder import BuildStats, IndexBuilder
from phpdocset.index.diagnostics import DropObserver, log_drop
from phpdocset.index.documents import DocumentStore
from phpdocset.utils.files import copy_documents

LOGGER = logging.getLogger(__name__)

ICON_NAMES = ("icon.png", "icon@2x.png")


def contents_dir(docset: Path) -> Path:
    return docset / "Contents"


def resources_dir(docset: Path) -> Path:
    return contents_dir(docset) / "Resources"


def documents_dir(docset: Path) -> Path:
    return resources_dir(docset) / "Documents"


def index_path(docset: Path) -> Path:
    return resources_dir(docset) / INDEX_FILENAME


def info_plist(lang: str) -> dict:
    return {
        "CFBundleIdentifier": f"php.{lang}",
        "CFBundleName": f"PHP ({get_lang_name(lang)})",
        "DocSetPlatformFamily": "php",
        "dashIndexFilePath": "index.html",
        "isDashDocset": True,
    }


def write_info_plist(docset: Path, lang: str) -> Path:
    path = contents_dir(docset) / "Info.plist"
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as handle:
        plistlib.dump(info_plist(lang), handle)
    return path


def get_docset_bundle_name(docset: Path) -> Optional[str]:
    """Read ``CFBundleName`` back from a docset, ``None`` if unavailable."""
    try:
        with (contents_dir(docset) / "Info.plist").open("rb") as handle:
            return plistlib.load(handle).get("CFBundleName")
    except (OSError, plistlib.InvalidFileException) as exc:
        LOGGER.warning("Unable to read bundle name of %s: %s", docset, exc)
        return None


def assemble_docset(
    docset: Path,
    config: AppConfig,
    source_documents: Path,
    *,
    icons_dir: Optional[Path] = None,
) -> Path:
    """Lay out ``docset`` with the rendered pages, icons and Info.plist."""
    LOGGER.info("Copying %s into %s", source_documents, docset)
    copy_documents(source_documents, documents_dir(docset))
    if icons_dir is not None:
        for name in ICON_NAMES:
            icon = icons_dir / name
            if icon.is_file():
                shutil.copy2(icon, docset / name)
            else:
                LOGGER.warning("Icon not found: %s", icon)
    write_info_plist(docset, config.lang)
    return docset


@contextmanager
def staged_docset(target: Path) -> Iterator[Path]:
    """Yield a staging directory that replaces ``target`` on success.

    On any error the staging directory is removed and ``target`` is left as
    it was.
    """
    staging = target.with_name(target.name + ".partial")
    if staging.exists():
        shutil.rmtree(staging)
    staging.mkdir(parents=True)
    try:
        yield staging
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise
    if target.exists():
        shutil.rmtree(target)
    staging.rename(target)


def build_docset(
    config: AppConfig,
    *,
    base_dir: Optional[Path] = None,
    icons_dir: Optional[Path] = None,
    write_script: bool = False,
    on_drop: DropObserver = log_drop,
) -> tuple[Path, BuildStats]:
    """Assemble the docset for ``config.lang`` and build its search index.

    Raises ``MetadataQueryError`` or ``IndexLoadError`` when the index cannot
    be built; the previous docset, if any, is then left untouched.
    """
    metadata = config.metadata_path(base_dir)
    source_documents = config.documents_dir(base_dir)
    if not metadata.is_file():
        raise FileNotFoundError(f"Metadata database not found: {metadata}")
    if not source_documents.is_dir():
        raise FileNotFoundError(f"Rendered documents not found: {source_documents}")

    target = config.docset_path(base_dir)
    target.parent.mkdir(parents=True, exist_ok=True)
    LOGGER.info(
        "Building %s (user notes %s)",
        target.name,
        "included" if config.user_notes else "excluded",
    )
    script_path = target.with_suffix(".sql") if write_script else None

    with staged_docset(target) as docset:
        assemble_docset(docset, config, source_documents, icons_dir=icons_dir)
        builder = IndexBuilder(
            metadata,
            DocumentStore(documents_dir(docset)),
            jobs=config.jobs,
            on_drop=on_drop,
        )
        stats = builder.build(index_path(docset), script_path=script_path)
    return target, stats
