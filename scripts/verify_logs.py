"""Check every imported conversation of a character for log/index consistency.

Usage:
    python scripts/verify_logs.py "Character Name"
"""

import sys
from pathlib import Path

# Add src to path if running from repo root
repo_root = Path(__file__).parent.parent
if (repo_root / "src").exists():
    sys.path.insert(0, str(repo_root / "src"))

from chatlog_import.config import load_config
from chatlog_import.logstore.paths import INDEX_SUFFIX, LogPaths
from chatlog_import.logstore.reader import verify_log


def verify(character: str) -> int:
    config = load_config()
    paths = LogPaths(config.storage.data_dir)
    log_dir = paths.log_dir(character)
    if not log_dir.is_dir():
        print(f"No logs for {character}")
        return 1

    failures = 0
    for log_path in sorted(log_dir.iterdir()):
        if log_path.suffix == INDEX_SUFFIX:
            continue
        problems = verify_log(log_path, paths.index_path(character, log_path.name))
        if problems:
            failures += 1
            print(f"{log_path.name}:")
            for problem in problems:
                print(f"  - {problem}")

    print(f"Checked {log_dir}: {failures} conversation(s) with problems")
    return 1 if failures else 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(verify(sys.argv[1]))
