"""Write the OpenAPI document of the service to a JSON file.

Usage: python scripts/generate_openapi.py [output_path]
"""
import json
import sys
from pathlib import Path

from vibes_served.config import Settings
from vibes_served.main import create_app


def main() -> None:
    out = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("openapi.json")
    app = create_app(Settings())
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(app.openapi(), indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"Wrote {out}")


if __name__ == "__main__":
    main()
