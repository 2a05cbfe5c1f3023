from pathlib import Path

from saae.config import get_settings

# Grammars whose comments are the C-family forms the trivia lexer understands.
_LANGUAGE_ALIASES = {
    "c": "c",
    "c#": "csharp",
    "c++": "cpp",
    "cpp": "cpp",
    "cs": "csharp",
    "csharp": "csharp",
    "go": "go",
    "golang": "go",
    "java": "java",
    "javascript": "javascript",
    "js": "javascript",
    "kotlin": "kotlin",
    "kt": "kotlin",
    "rs": "rust",
    "rust": "rust",
    "swift": "swift",
    "ts": "typescript",
    "typescript": "typescript",
}

_EXTENSION_LANGUAGE_MAP = {
    ".c": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".cs": "csharp",
    ".cxx": "cpp",
    ".go": "go",
    ".h": "c",
    ".hh": "cpp",
    ".hpp": "cpp",
    ".java": "java",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".rs": "rust",
    ".swift": "swift",
    ".ts": "typescript",
}

_LANGUAGE_DEFAULT_EXTENSIONS = {
    "c": ".c",
    "cpp": ".cpp",
    "csharp": ".cs",
    "go": ".go",
    "java": ".java",
    "javascript": ".js",
    "kotlin": ".kt",
    "rust": ".rs",
    "swift": ".swift",
    "typescript": ".ts",
}

_SUPPORTED_LANGUAGES = set(_LANGUAGE_DEFAULT_EXTENSIONS)


def supported_languages() -> list[str]:
    return sorted(_SUPPORTED_LANGUAGES)


def normalize_language(language: str) -> str:
    normalized = language.strip().lower()
    resolved = _LANGUAGE_ALIASES.get(normalized, normalized)
    if resolved not in _SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language '{language}'. Supported: {supported_languages()}")
    return resolved


def detect_language_from_path(file_path: Path) -> str:
    suffix = file_path.suffix.lower()
    if suffix in _EXTENSION_LANGUAGE_MAP:
        return _EXTENSION_LANGUAGE_MAP[suffix]
    raise ValueError(f"Unsupported file extension: {suffix}")


def resolve_language(language: str | None, file_path: Path | None) -> str:
    """Explicit language first, then the file extension, then ``SAAE_LANGUAGE``."""
    if language:
        return normalize_language(language)
    if file_path and file_path.suffix:
        return detect_language_from_path(file_path)
    return normalize_language(get_settings().language)


def default_identity(language: str) -> str:
    return f"source{_LANGUAGE_DEFAULT_EXTENSIONS.get(language, '.txt')}"
