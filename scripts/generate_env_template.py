"""Generate .env.example from the Settings fields, with defaults filled in and secrets left blank."""
import sys
from pathlib import Path

root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(root))

from backend.config import env_template  # noqa: E402

dest = root / '.env.example'
dest.write_text(env_template())
print(f'Wrote template to {dest}')
