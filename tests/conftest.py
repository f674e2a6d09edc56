"""Import helpers for scripts that aren't packages."""
import importlib.util
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).parent.parent
SCRIPTS_DIR = REPO_ROOT / "scripts"

# Add the repo root and scripts/ to sys.path so pkg.promptscrub and lib.* import.
for _path in (REPO_ROOT, SCRIPTS_DIR):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))


def _import_script(name: str, filename: str):
    """Import a script file as a module using importlib."""
    spec = importlib.util.spec_from_file_location(name, SCRIPTS_DIR / filename)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


format_context_cli = _import_script("format_context_cli", "format-context.py")
sanitize_cli = _import_script("sanitize_cli", "sanitize.py")
