"""
Technology detection from file paths.

Deterministic heuristics only: no file content is read. Languages come from
the extension table; frameworks, runtimes and tooling from well-known
filenames.
"""

from collections.abc import Iterable
from pathlib import PurePosixPath

from codegraph.models.graph import DetectedTechnology, TechnologyCategory

# extension -> language identifier stored on file nodes
EXTENSION_LANGUAGES: dict[str, str] = {
    # JavaScript/TypeScript
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    # Python
    "py": "python",
    "pyw": "python",
    # Java
    "java": "java",
    # C/C++
    "c": "c",
    "h": "c",
    "cpp": "cpp",
    "cc": "cpp",
    "cxx": "cpp",
    "hpp": "cpp",
    # HTML/CSS
    "html": "html",
    "htm": "html",
    "css": "css",
    # Data
    "json": "json",
    "sql": "sql",
    # Shell
    "sh": "shell",
    "bash": "shell",
    "zsh": "shell",
}

LANGUAGE_DISPLAY_NAMES: dict[str, str] = {
    "javascript": "JavaScript",
    "typescript": "TypeScript",
    "python": "Python",
    "java": "Java",
    "c": "C",
    "cpp": "C++",
    "html": "HTML",
    "css": "CSS",
    "json": "JSON",
    "sql": "SQL",
    "shell": "Shell",
}

NEXT_CONFIG_FILES = {"next.config.js", "next.config.ts"}
PYTHON_MANIFEST_FILES = {"requirements.txt", "setup.py"}
DOCKER_FILES = {"dockerfile", "docker-compose.yml", "docker-compose.yaml"}


def detect_language(path: str) -> str | None:
    """
    Detect a file's language from its extension.

    Args:
        path: File path or name

    Returns:
        Lowercase language identifier, or None for unknown extensions
    """
    suffix = PurePosixPath(path).suffix
    if not suffix:
        return None
    return EXTENSION_LANGUAGES.get(suffix[1:].lower())


def _basename(path: str) -> str:
    return PurePosixPath(path).name.lower()


def _has_extension(files: list[str], *extensions: str) -> bool:
    return any(path.lower().endswith(extensions) for path in files)


def detect_technologies(files: Iterable[str]) -> list[DetectedTechnology]:
    """
    Detect technologies used by a project from its file paths.

    Languages are listed first, in the order their first file appears, then
    filename-derived frameworks, runtimes and tooling. Each name appears once.

    Args:
        files: Project-relative file paths

    Returns:
        Ordered, de-duplicated technologies
    """
    files = list(files)
    technologies: list[DetectedTechnology] = []
    detected: set[str] = set()

    def add(name: str, category: TechnologyCategory) -> None:
        if name not in detected:
            detected.add(name)
            technologies.append(DetectedTechnology(name=name, category=category))

    for path in files:
        language = detect_language(path)
        if language:
            add(LANGUAGE_DISPLAY_NAMES[language], TechnologyCategory.LANGUAGE)

    names = {_basename(path) for path in files}
    has_package_json = "package.json" in names

    if has_package_json and _has_extension(files, ".jsx", ".tsx"):
        add("React", TechnologyCategory.FRAMEWORK)

    if names & NEXT_CONFIG_FILES:
        add("Next.js", TechnologyCategory.FRAMEWORK)

    if has_package_json and _has_extension(files, ".js", ".mjs"):
        add("Node.js", TechnologyCategory.RUNTIME)

    if names & PYTHON_MANIFEST_FILES and _has_extension(files, ".py"):
        add("Python Ecosystem", TechnologyCategory.TOOLING)

    if "pom.xml" in names:
        add("Maven", TechnologyCategory.TOOLING)

    if names & DOCKER_FILES:
        add("Docker", TechnologyCategory.TOOLING)

    return technologies
