"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# Languages the PHP manual is published in on php.net
LANG_CODES = ("en", "de", "es", "fr", "it", "ja", "pt_BR", "ru", "tr", "uk", "zh")
LANG_NAMES = (
    "English",
    "Deutsch",
    "Español",
    "Français",
    "Italiano",
    "日本語",
    "Português Brasil",
    "Русский",
    "Türkçe",
    "Українська",
    "简体中文",
)

METADATA_FILENAME = "index.sqlite"
DOCUMENTS_DIRNAME = "res"
INDEX_FILENAME = "docSet.dsidx"


def normalize_lang_code(code: str) -> str:
    """Normalize a language code, e.g. ``pt_br`` to ``pt_BR``."""
    code = code.strip()
    if "_" in code:
        lang, _, region = code.partition("_")
        return f"{lang.lower()}_{region.upper()}"
    return code.lower()


def get_lang_name(code: str) -> str:
    code = normalize_lang_code(code)
    try:
        return LANG_NAMES[LANG_CODES.index(code)]
    except ValueError:
        raise ValueError(f"Unsupported language: {code}") from None


@dataclass(slots=True)
class AppConfig:
    source_dir: Path = Path("build")
    output_dir: Path = Path("output")
    lang: str = "en"
    user_notes: bool = False
    jobs: int = 1

    def __post_init__(self) -> None:
        self.source_dir = Path(self.source_dir)
        self.output_dir = Path(self.output_dir)
        self.lang = normalize_lang_code(self.lang)

    @property
    def docset_name(self) -> str:
        return f"PHP_{self.lang}"

    def render_dir(self, base_dir: Path | None = None) -> Path:
        """Directory holding the renderer output for ``lang``."""
        return self._resolve(self.source_dir, base_dir) / self.lang

    def metadata_path(self, base_dir: Path | None = None) -> Path:
        return self.render_dir(base_dir) / METADATA_FILENAME

    def documents_dir(self, base_dir: Path | None = None) -> Path:
        return self.render_dir(base_dir) / DOCUMENTS_DIRNAME

    def docset_path(self, base_dir: Path | None = None) -> Path:
        return self._resolve(self.output_dir, base_dir) / f"{self.docset_name}.docset"

    @staticmethod
    def _resolve(path: Path, base_dir: Path | None) -> Path:
        if path.is_absolute() or base_dir is None:
            return path
        return base_dir / path
