"""Constants and default values for the developer tools."""

# Server identity
SERVER_NAME = "developer"
SERVER_VERSION = "0.1.0"

# Undo history defaults
DEFAULT_MAX_UNDO_HISTORY = 10

# Size limits
MAX_VIEW_FILE_BYTES = 400 * 1024  # 400KB
MAX_CHAR_COUNT = 400_000
MAX_WRITE_CHAR_COUNT = 400_000
MAX_SHELL_OUTPUT_CHARS = 400_000

# Lines of context shown around a str_replace edit
SNIPPET_LINES = 4

# Ignore file consulted for the sandbox filter
DEFAULT_IGNORE_FILE = ".gitignore"

# Shell defaults
DEFAULT_POSIX_SHELL = "bash"
POSIX_SHELL_ARGS = ["-c"]
WINDOWS_SHELL = "powershell.exe"
WINDOWS_SHELL_ARGS = ["-NoProfile", "-NonInteractive", "-Command"]

# Polling interval while waiting on a child process (seconds)
SHELL_POLL_INTERVAL = 0.1

# Language detection by extension
LANGUAGE_MAP = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "jsx",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".c": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".h": "c",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".kt": "kotlin",
    ".scala": "scala",
    ".lua": "lua",
    ".r": "r",
    ".sh": "bash",
    ".bash": "bash",
    ".zsh": "zsh",
    ".fish": "fish",
    ".ps1": "powershell",
    ".bat": "batch",
    ".md": "markdown",
    ".rst": "rst",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".ini": "ini",
    ".cfg": "ini",
    ".xml": "xml",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "scss",
    ".sql": "sql",
    ".dockerfile": "dockerfile",
    ".txt": "text",
}

# Whole-filename matches checked before the extension map
FILENAME_LANGUAGE_MAP = {
    "Dockerfile": "dockerfile",
    "Makefile": "makefile",
    "CMakeLists.txt": "cmake",
    "Cargo.lock": "toml",
}

SERVER_INSTRUCTIONS = (
    "This server provides developer tools including text editing, shell command "
    "execution and workflow management. Use the text_editor tool to view and modify "
    "files, the shell tool to execute commands, and the workflow tool to manage "
    "multi-step problem-solving processes with branching and revision support."
)
