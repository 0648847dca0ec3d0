"""Declarative pattern tables used by the language and command analyzers.

Tables are plain data so they can be extended and tested independently of
the scanning code. Iteration order of ``LANGUAGE_PATTERNS`` is the
evidence collection order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Tuple


@dataclass(frozen=True)
class LanguagePatterns:
    keywords: Tuple[str, ...]
    code_block_tags: Tuple[str, ...]
    file_extensions: Tuple[str, ...]
    frameworks: Tuple[str, ...]


LANGUAGE_PATTERNS: Mapping[str, LanguagePatterns] = {
    "JavaScript": LanguagePatterns(
        keywords=("javascript", "js", "node", "npm", "yarn"),
        code_block_tags=("javascript", "js"),
        file_extensions=(".js", ".mjs"),
        frameworks=("react", "vue", "angular", "express", "next"),
    ),
    "TypeScript": LanguagePatterns(
        keywords=("typescript", "ts"),
        code_block_tags=("typescript", "ts"),
        file_extensions=(".ts", ".tsx"),
        frameworks=("angular", "nest", "next"),
    ),
    "Python": LanguagePatterns(
        keywords=("python", "py", "pip", "conda"),
        code_block_tags=("python", "py"),
        file_extensions=(".py",),
        frameworks=("django", "flask", "fastapi", "pandas"),
    ),
    "Java": LanguagePatterns(
        keywords=("java", "maven", "gradle"),
        code_block_tags=("java",),
        file_extensions=(".java",),
        frameworks=("spring", "hibernate"),
    ),
    "Go": LanguagePatterns(
        keywords=("golang", "go"),
        code_block_tags=("go",),
        file_extensions=(".go",),
        frameworks=("gin", "echo"),
    ),
    "Rust": LanguagePatterns(
        keywords=("rust", "cargo"),
        code_block_tags=("rust",),
        file_extensions=(".rs",),
        frameworks=("actix", "rocket"),
    ),
    "PHP": LanguagePatterns(
        keywords=("php", "composer"),
        code_block_tags=("php",),
        file_extensions=(".php",),
        frameworks=("laravel", "symfony"),
    ),
    "C#": LanguagePatterns(
        keywords=("csharp", "c#", "dotnet", ".net"),
        code_block_tags=("csharp", "cs"),
        file_extensions=(".cs",),
        frameworks=("asp.net", "blazor"),
    ),
    "Ruby": LanguagePatterns(
        keywords=("ruby", "gem", "bundler"),
        code_block_tags=("ruby", "rb"),
        file_extensions=(".rb",),
        frameworks=("rails", "sinatra"),
    ),
}

EVIDENCE_CONFIDENCE = {
    "syntax": 0.9,
    "extension": 0.8,
    "framework": 0.7,
    "keyword": 0.5,
}

# Leading token -> language. Checked before substring hints.
COMMAND_PREFIXES: Mapping[str, str] = {
    "npm": "JavaScript",
    "npx": "JavaScript",
    "yarn": "JavaScript",
    "pnpm": "JavaScript",
    "node": "JavaScript",
    "pip": "Python",
    "pip3": "Python",
    "python": "Python",
    "python3": "Python",
    "pytest": "Python",
    "conda": "Python",
    "poetry": "Python",
    "cargo": "Rust",
    "rustc": "Rust",
    "rustup": "Rust",
    "go": "Go",
    "mvn": "Java",
    "gradle": "Java",
    "./gradlew": "Java",
    "gradlew": "Java",
    "./mvnw": "Java",
    "java": "Java",
    "dotnet": "C#",
    "nuget": "C#",
    "bundle": "Ruby",
    "gem": "Ruby",
    "rake": "Ruby",
    "ruby": "Ruby",
    "rails": "Ruby",
    "composer": "PHP",
    "php": "PHP",
    "phpunit": "PHP",
    "make": "C/C++",
    "cmake": "C/C++",
    "gcc": "C/C++",
    "g++": "C/C++",
    "clang": "C/C++",
    "docker": "Docker",
    "docker-compose": "Docker",
    "podman": "Docker",
    "curl": "Shell",
    "wget": "Shell",
    "chmod": "Shell",
    "chown": "Shell",
    "mkdir": "Shell",
    "cp": "Shell",
    "mv": "Shell",
    "rm": "Shell",
    "cd": "Shell",
    "git": "Shell",
    "export": "Shell",
    "source": "Shell",
}

# Substrings that identify a language anywhere in the command text.
COMMAND_HINTS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("JavaScript", ("npm ", "yarn ", "pnpm ", "node ")),
    ("Python", ("pip install", "python -m", "pytest", "conda ")),
    ("Rust", ("cargo ", "rustc ")),
    ("Go", ("go build", "go run", "go test", "go get", "go mod")),
    ("Java", ("mvn ", "gradlew", "java -jar")),
    ("C#", ("dotnet ",)),
    ("Ruby", ("bundle exec", "gem install", "rake ")),
    ("PHP", ("composer ", "phpunit")),
    ("Docker", ("docker ", "podman ")),
)

# Substrings checked by the associator's "language-specific" bonus.
LANGUAGE_COMMAND_MARKERS: Mapping[str, Tuple[str, ...]] = {
    "javascript": ("npm", "yarn", "node"),
    "typescript": ("tsc", "npm", "yarn"),
    "python": ("pip", "python", "pytest"),
    "rust": ("cargo",),
    "go": ("go ",),
    "java": ("mvn", "gradle", "java"),
    "c#": ("dotnet",),
    "ruby": ("bundle", "gem", "ruby"),
    "php": ("composer", "php"),
}

PLACEHOLDER_WORDS = frozenset(
    {"unknown", "mysterious", "weird", "foo", "bar", "baz", "xyz", "placeholder", "example", "todo"}
)

# Commands the associator treats as shell-generic when no language is inferred.
SHELL_LIKE_TOKENS = frozenset(
    {"echo", "cat", "ls", "sudo", "touch", "tar", "unzip", "ssh", "scp", "kubectl", "helm", "webpack", "vite", "tsc"}
)

LOOKS_LIKE_COMMAND: Tuple[str, ...] = (
    r"^(npm|yarn|pnpm|pip|pip3|cargo|go|mvn|gradle|make|cmake|dotnet|bundle|composer|gem)(\s+|$)",
    r"^(python|python3|node|java|ruby|php|rustc|gcc|clang)(\s+|$)",
    r"^(docker|kubectl|helm|podman)(\s+|$)",
    r"^(webpack|vite|rollup|parcel|tsc|babel)(\s+|$)",
    r"^(pytest|rspec|phpunit|jest|mocha|jasmine)(\s+|$)",
    r"^(curl|wget|git|cd|mkdir|cp|mv|rm|chmod|chown)(\s+|$)",
    r"^\./[\w.-]+",
    r"^[\w.-]+\s+[\w.-]+",
)

COMMAND_CATEGORIES: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "build": {
        "npm": (r"npm\s+run\s+build", r"npm\s+run\s+compile", r"npm\s+run\s+dist"),
        "yarn": (r"yarn\s+build", r"yarn\s+run\s+build", r"yarn\s+compile"),
        "cargo": (r"cargo\s+build",),
        "go": (r"go\s+build", r"go\s+install"),
        "maven": (r"mvn\s+compile", r"mvn\s+package", r"mvn\s+install"),
        "gradle": (r"gradle\s+build", r"gradle\s+assemble", r"\./gradlew\s+build"),
        "make": (r"make\s+build", r"make\s+all", r"make\s+compile"),
        "cmake": (r"cmake\s+--build", r"cmake\s+\."),
        "python": (r"python\s+setup\.py\s+build", r"python\s+-m\s+build", r"pip\s+install\s+\."),
        "dotnet": (r"dotnet\s+build", r"dotnet\s+publish"),
        "ruby": (r"bundle\s+exec\s+rake\s+build", r"gem\s+build"),
    },
    "test": {
        "npm": (r"npm\s+test", r"npm\s+run\s+test", r"npm\s+run\s+spec"),
        "yarn": (r"yarn\s+test", r"yarn\s+run\s+test"),
        "cargo": (r"cargo\s+test",),
        "go": (r"go\s+test",),
        "maven": (r"mvn\s+test", r"mvn\s+verify"),
        "gradle": (r"gradle\s+test", r"\./gradlew\s+test"),
        "make": (r"make\s+test", r"make\s+check"),
        "python": (r"python\s+-m\s+pytest", r"pytest", r"python\s+-m\s+unittest"),
        "dotnet": (r"dotnet\s+test",),
        "ruby": (r"bundle\s+exec\s+rspec", r"rake\s+test"),
        "php": (r"phpunit", r"composer\s+test"),
    },
    "run": {
        "npm": (r"npm\s+start", r"npm\s+run\s+start", r"npm\s+run\s+dev", r"npm\s+run\s+serve"),
        "yarn": (r"yarn\s+start", r"yarn\s+dev", r"yarn\s+serve"),
        "cargo": (r"cargo\s+run",),
        "go": (r"go\s+run",),
        "python": (r"python3?\s+[\w/.-]+\.py", r"python3?\s+-m\s+\w+", r"manage\.py\s+runserver"),
        "java": (r"java\s+-jar",),
        "dotnet": (r"dotnet\s+run",),
        "ruby": (r"ruby\s+\w+\.rb", r"rails\s+server"),
        "php": (r"php\s+\w+\.php", r"php\s+-S"),
        "node": (r"node\s+[\w/.-]+\.js",),
    },
    "install": {
        "npm": (r"npm\s+install", r"npm\s+i(?:\s|$)", r"npm\s+ci"),
        "yarn": (r"yarn\s+install", r"^yarn$"),
        "pip": (r"pip3?\s+install", r"python\s+-m\s+pip\s+install"),
        "cargo": (r"cargo\s+install",),
        "go": (r"go\s+get", r"go\s+mod\s+download"),
        "maven": (r"mvn\s+dependency:resolve",),
        "gradle": (r"gradle\s+dependencies",),
        "composer": (r"composer\s+install",),
        "bundle": (r"bundle\s+install",),
        "dotnet": (r"dotnet\s+restore",),
    },
}

CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("build", ("build", "compile", "dist", "assemble", "package")),
    ("test", ("test", "spec", "check")),
    ("run", ("start", "serve", "dev", "run ", "exec")),
    ("install", ("install", "add", "get", "restore", "download")),
)

__all__ = [
    "CATEGORY_KEYWORDS",
    "COMMAND_CATEGORIES",
    "COMMAND_HINTS",
    "COMMAND_PREFIXES",
    "EVIDENCE_CONFIDENCE",
    "LANGUAGE_COMMAND_MARKERS",
    "LANGUAGE_PATTERNS",
    "LOOKS_LIKE_COMMAND",
    "LanguagePatterns",
    "PLACEHOLDER_WORDS",
    "SHELL_LIKE_TOKENS",
]
