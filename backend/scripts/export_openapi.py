"""Write the Let's Roll OpenAPI document without starting the server.

Usage:
    python scripts/export_openapi.py              # print to stdout
    python scripts/export_openapi.py openapi.json # write to a file
"""
import json
import sys
from pathlib import Path

# Make `letsroll` importable when run from a checkout
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from letsroll.main import app  # noqa: E402


def main() -> None:
    document = app.openapi()
    target = sys.argv[1] if len(sys.argv) > 1 else "-"
    content = json.dumps(document, indent=2, ensure_ascii=False)
    if target == "-":
        print(content)
    else:
        Path(target).write_text(content, encoding="utf-8")


if __name__ == "__main__":
    main()
